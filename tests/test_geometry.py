import unittest

from statementanalyzer.geometry import group_rows, rows_from_text
from statementanalyzer.models import TextFragment


def frag(text, x, y):
  return TextFragment(text=text, x=x, y=y, width=len(text) * 5, height=8)


class GroupRowsTest(unittest.TestCase):
  def test_single_fragment_is_single_row(self):
    rows = group_rows([frag('hello', 10, 500)])
    self.assertEqual(len(rows), 1)
    self.assertEqual([f.text for f in rows[0].fragments], ['hello'])

  def test_empty_page(self):
    self.assertEqual(group_rows([]), [])

  def test_rows_top_to_bottom_and_left_to_right(self):
    fragments = [
      frag('-R450.00', 400, 698),
      frag('second', 50, 680),
      frag('15/03/2025', 10, 700),
      frag('WOOLWORTHS SANDTON', 120, 701),
    ]
    rows = group_rows(fragments, tolerance=5, page=3)
    self.assertEqual(len(rows), 2)
    self.assertEqual([f.text for f in rows[0].fragments], ['15/03/2025', 'WOOLWORTHS SANDTON', '-R450.00'])
    self.assertEqual([f.text for f in rows[1].fragments], ['second'])
    self.assertEqual([(r.page, r.index) for r in rows], [(3, 1), (3, 2)])

  def test_tolerance_is_tunable(self):
    fragments = [frag('a', 10, 700), frag('b', 60, 693)]
    self.assertEqual(len(group_rows(fragments, tolerance=5)), 2)
    self.assertEqual(len(group_rows(fragments, tolerance=8)), 1)

  def test_rows_stay_within_tolerance_of_anchor(self):
    # Each step is within tolerance but the drift is not.
    fragments = [frag('a', 10, 700), frag('b', 20, 696), frag('c', 30, 692), frag('d', 40, 688)]
    rows = group_rows(fragments, tolerance=5)
    for row in rows:
      ys = [f.y for f in row.fragments]
      self.assertLessEqual(max(ys) - min(ys), 5)
    self.assertEqual(len(rows), 2)


class RowsFromTextTest(unittest.TestCase):
  def test_each_line_is_a_row_of_tokens(self):
    rows = rows_from_text('15/03/2025 WOOLWORTHS SANDTON -450.00\n16/03/2025 ENGEN 300.00\n')
    self.assertEqual(len(rows), 2)
    self.assertEqual([f.text for f in rows[0].fragments], ['15/03/2025', 'WOOLWORTHS', 'SANDTON', '-450.00'])
    self.assertEqual([f.x for f in rows[0].fragments], [0, 1, 2, 3])
    self.assertGreater(rows[0].fragments[0].y, rows[1].fragments[0].y)

  def test_wrapped_line_joins_dated_row(self):
    rows = rows_from_text('16/03/2025 ENGEN\nSANDTON FUEL 300.00\n17/03/2025 SPAR 20.00')
    self.assertEqual(len(rows), 2)
    self.assertEqual(rows[0].text, '16/03/2025 ENGEN SANDTON FUEL 300.00')
    self.assertEqual(len({f.y for f in rows[0].fragments}), 1)
    self.assertEqual([f.x for f in rows[0].fragments], [0, 1, 2, 3, 4])

  def test_complete_row_does_not_absorb_next_line(self):
    rows = rows_from_text('16/03/2025 ENGEN 300.00\nPage 1 of 3')
    self.assertEqual(len(rows), 2)

  def test_header_line_is_never_absorbed(self):
    rows = rows_from_text('16/03/2025 ENGEN\nDate Description Amount')
    self.assertEqual(len(rows), 2)
    self.assertEqual(rows[1].text, 'Date Description Amount')

  def test_window_limits_continuation(self):
    text = '16/03/2025 ENGEN\nSANDTON\nFUEL 300.00'
    self.assertEqual(len(rows_from_text(text, window=2)), 2)
    self.assertEqual(len(rows_from_text(text, window=3)), 1)

  def test_blank_text(self):
    self.assertEqual(rows_from_text(''), [])
    self.assertEqual(rows_from_text('\n\n  \n'), [])


if __name__ == '__main__':
  unittest.main()
