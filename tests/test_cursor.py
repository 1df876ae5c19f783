"""Tests for geometry primitives and the cursor model."""

import pytest

from pdfquill.engine.cursor import Cursor
from pdfquill.engine.geometry import Margins, PageFormat, Unit
from pdfquill.exceptions import ConfigurationError, StructuralInvariantViolation


@pytest.mark.unit
class TestMargins:
    """Margin shorthand parsing."""

    def test_one_value(self):
        assert Margins.from_values([1], 72) == Margins(72, 72, 72, 72, 1.5)

    def test_two_and_three_values(self):
        assert Margins.from_values([1, 2], 10) == Margins(10, 20, 10, 20, 1.5)
        assert Margins.from_values([1, 2, 0.5], 10) == Margins(10, 20, 10, 20, 5)

    def test_four_and_five_values(self):
        assert Margins.from_values([1, 2, 3, 4]) == Margins(1, 2, 3, 4, 1.5)
        assert Margins.from_values([1, 2, 3, 4, 5]) == Margins(1, 2, 3, 4, 5)

    def test_cell_kept_from_base(self):
        base = Margins(cell=3.0)
        assert Margins.from_values([10], base=base).cell == 3.0

    @pytest.mark.parametrize("values", [[], [1, 2, 3, 4, 5, 6], ["a"]])
    def test_invalid_counts_and_values(self, values):
        with pytest.raises(ConfigurationError):
            Margins.from_values(values)


@pytest.mark.unit
def test_units_and_formats():
    assert Unit.IN.scale == 72.0
    assert Unit.MM.scale == pytest.approx(72 / 25.4)
    assert PageFormat.A4.size == (595.28, 841.89)


@pytest.mark.unit
class TestCursor:
    """Cursor positioning and the indentation stack."""

    def make(self, scale=1.0):
        return Cursor(612, 792, Margins(), scale)

    def test_starts_at_top_left_of_text_area(self):
        cursor = self.make()
        assert (cursor.x, cursor.y) == (36, 756)
        assert cursor.right_edge == 576
        assert cursor.indents == [36]

    def test_goto_converts_top_down_user_units(self):
        cursor = self.make(scale=72)
        cursor.goto(1, 2)
        assert (cursor.x, cursor.y) == (72, 792 - 144)

    def test_goto_negative_measures_from_far_edges(self):
        cursor = self.make(scale=72)
        cursor.goto(-1, -1)
        assert (cursor.x, cursor.y) == (612 - 72, 72)

    def test_from_top(self):
        cursor = self.make(scale=72)
        cursor.goto(None, 3)
        assert cursor.from_top() == pytest.approx(3)

    def test_newline_moves_down_and_home(self):
        cursor = self.make()
        cursor.advance(50)
        cursor.newline(14.4, 2)
        assert cursor.x == 36
        assert cursor.y == pytest.approx(756 - 28.8)

    def test_at_bottom_includes_cell_margin(self):
        cursor = self.make()
        cursor.y = 37.5
        assert cursor.at_bottom
        cursor.y = 37.6
        assert not cursor.at_bottom

    def test_indent_push_and_pop(self):
        cursor = self.make()
        assert cursor.push_indent(18) == 54
        assert cursor.push_indent(18) == 72
        assert cursor.margins.left == 72
        assert cursor.indent_depth == 2
        assert cursor.pop_indent(2) == 36
        assert cursor.x == cursor.margins.left == 36

    def test_underflow_raises_without_mutation(self):
        cursor = self.make()
        cursor.push_indent(10)
        with pytest.raises(StructuralInvariantViolation):
            cursor.pop_indent(2)
        assert cursor.indents == [36, 46]
        assert cursor.margins.left == 46
