import unittest

from statementanalyzer.config import ExtractionConfig
from statementanalyzer.models import Row, TextFragment, TokenKind
from statementanalyzer.tokens import REJECT_HEADER, REJECT_TOO_SHORT, REJECT_TOO_SPARSE, TokenClassifier


def make_row(*texts, page=1, index=1):
  fragments = tuple(TextFragment(text=t, x=i * 80, y=700, width=len(t) * 5, height=8) for i, t in enumerate(texts))
  return Row(fragments=fragments, page=page, index=index)


def kinds(classified):
  return [t.kind for t in classified.tokens]


class RowRejectionTest(unittest.TestCase):
  def setUp(self):
    self.classifier = TokenClassifier(ExtractionConfig(default_year=2025))

  def test_header_row_rejected_regardless_of_fragment_count(self):
    self.assertEqual(self.classifier.classify(make_row('Date', 'Description', 'Amount', 'Balance')).rejected, REJECT_HEADER)
    self.assertEqual(self.classifier.classify(make_row('Date Description Amount Balance')).rejected, REJECT_HEADER)

  def test_header_keywords_match_inside_words(self):
    row = make_row('01/03/2025', 'Balance Brought Forward', '1,000.00')
    self.assertEqual(self.classifier.classify(row).rejected, REJECT_HEADER)

  def test_too_short(self):
    self.assertEqual(self.classifier.classify(make_row('12', '3')).rejected, REJECT_TOO_SHORT)

  def test_too_sparse(self):
    self.assertEqual(self.classifier.classify(make_row('15/03/2025 SPAR 20.00')).rejected, REJECT_TOO_SPARSE)

  def test_thresholds_are_tunable(self):
    classifier = TokenClassifier(ExtractionConfig(min_fragments=3, min_row_chars=10))
    self.assertEqual(classifier.classify(make_row('15/03/2025', 'SPAR')).rejected, REJECT_TOO_SPARSE)
    self.assertEqual(classifier.classify(make_row('1/3', 'SPA', '5')).rejected, REJECT_TOO_SHORT)


class TokenKindTest(unittest.TestCase):
  def setUp(self):
    self.classifier = TokenClassifier(ExtractionConfig(default_year=2025))

  def test_date_description_amount(self):
    classified = self.classifier.classify(make_row('15/03/2025', 'WOOLWORTHS SANDTON', '-R450.00'))
    self.assertIsNone(classified.rejected)
    self.assertEqual(kinds(classified), [TokenKind.DATE, TokenKind.DESCRIPTION, TokenKind.AMOUNT])
    self.assertEqual(classified.dates[0].value, '2025-03-15')
    self.assertEqual(classified.amounts[0].value, -450.0)

  def test_date_split_across_fragments(self):
    classified = self.classifier.classify(make_row('15', 'Mar', '2025', 'CHECKERS', 'R89.99'))
    self.assertEqual(kinds(classified)[:3], [TokenKind.DATE] * 3)
    self.assertEqual(classified.dates[0].value, '2025-03-15')
    self.assertEqual([t.value for t in classified.amounts], [89.99])

  def test_year_less_date_uses_configured_year(self):
    classified = self.classifier.classify(make_row('15 Mar', 'SPAR', '20.00'))
    self.assertEqual(classified.dates[0].value, '2025-03-15')

  def test_detached_debit_suffix(self):
    classified = self.classifier.classify(make_row('15/03/2025', 'ENGEN FUEL', '500.00', 'DR'))
    self.assertEqual([t.value for t in classified.amounts], [-500.0])
    self.assertEqual(classified.tokens[3].kind, TokenKind.UNKNOWN)

  def test_amount_bounds(self):
    classified = self.classifier.classify(make_row('15/03/2025', 'ACCT NO', '123456789', '0.00'))
    self.assertEqual(classified.amounts, [])
    self.assertEqual(classified.tokens[2].kind, TokenKind.UNKNOWN)

  def test_max_amount_is_configurable(self):
    classifier = TokenClassifier(ExtractionConfig(max_amount=1000))
    classified = classifier.classify(make_row('15/03/2025', 'CAR DEALER', '2,500.00'))
    self.assertEqual(classified.amounts, [])

  def test_short_codes_and_single_chars_are_unknown(self):
    classified = self.classifier.classify(make_row('15/03/2025', 'EFT', '*', 'NETFLIX', '199.00'))
    self.assertEqual(kinds(classified), [
      TokenKind.DATE, TokenKind.UNKNOWN, TokenKind.UNKNOWN, TokenKind.DESCRIPTION, TokenKind.AMOUNT,
    ])

  def test_multiple_amounts(self):
    classified = self.classifier.classify(make_row('02/03/2025', 'NETFLIX', '-199.00', '24,801.00'))
    self.assertEqual([t.value for t in classified.amounts], [-199.0, 24801.0])


class LenientModeTest(unittest.TestCase):
  ROW = ('REF12345', 'COFFEE SHOP', '45.5')

  def test_strict_mode_never_promotes(self):
    classified = TokenClassifier(ExtractionConfig.strict()).classify(make_row(*self.ROW))
    self.assertEqual(classified.dates, [])
    self.assertEqual(classified.amounts, [])
    self.assertFalse(any(t.promoted for t in classified.tokens))

  def test_lenient_mode_promotes_date_and_amount(self):
    classified = TokenClassifier(ExtractionConfig.lenient_mode()).classify(make_row(*self.ROW))
    self.assertEqual(len(classified.dates), 1)
    self.assertEqual(classified.dates[0].text, 'REF12345')
    self.assertTrue(classified.dates[0].promoted)
    self.assertEqual(classified.dates[0].value, 'REF12345')
    self.assertEqual([t.value for t in classified.amounts], [45.5])
    self.assertTrue(classified.amounts[0].promoted)

  def test_decimal_before_reference_stays_an_amount(self):
    classified = TokenClassifier(ExtractionConfig.lenient_mode()).classify(make_row('COFFEE SHOP', '45.5', 'REF12345'))
    self.assertEqual([t.text for t in classified.dates], ['REF12345'])
    self.assertEqual([t.value for t in classified.amounts], [45.5])

  def test_promoted_amount_respects_max_amount(self):
    classifier = TokenClassifier(ExtractionConfig.lenient_mode())
    classified = classifier.classify(make_row('15/03/2025', 'ACCT', 'SPAR', '98765432.10'))
    self.assertEqual(classified.amounts, [])

    capped = TokenClassifier(ExtractionConfig.lenient_mode(max_amount=40))
    self.assertEqual(capped.classify(make_row('REF12345', 'COFFEE SHOP', '45.5')).amounts, [])

  def test_lenient_mode_keeps_strict_matches(self):
    classified = TokenClassifier(ExtractionConfig.lenient_mode()).classify(make_row('15/03/2025', 'SPAR', '20.00'))
    self.assertFalse(any(t.promoted for t in classified.tokens))


if __name__ == '__main__':
  unittest.main()
