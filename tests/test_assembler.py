"""
Tests for Stage 4 assembly and the shared text helpers
"""

from unittest.mock import patch

import pytest

from amountex.models.amounts import AmountCategory, ClassifiedAmount, PipelineStatus
from amountex.processors.amounts.assembler import ResultAssembler
from amountex.processors.amounts.text_utils import context_window, format_amount, locate_amount


class TestTextUtils:
    """Tests for amount formatting and location"""

    @pytest.mark.parametrize('value,expected', [
        (1200.0, '1200'),
        (12.5, '12.5'),
        (0.0, '0'),
        (1250.75, '1250.75'),
    ])
    def test_format_amount(self, value, expected):
        assert format_amount(value) == expected

    def test_locate_skips_embedded_numbers(self, bill_text):
        assert locate_amount(bill_text, 200.0) == bill_text.index('Rs.200') + 3

    def test_locate_after_decimal_prefix(self):
        assert locate_amount("Total Rs.1200", 1200) == 9

    def test_locate_skips_decimal_parts(self):
        assert locate_amount("Rate 200.50 then 200", 200) == 17

    def test_locate_missing(self):
        assert locate_amount("nothing here", 5) == -1

    def test_context_window_bounds(self):
        assert context_window("abcdef", 2, 1, radius=1) == "bcd"
        assert context_window("abcdef", 0, 1, radius=10) == "abcdef"


class TestResultAssembler:
    """Tests for ResultAssembler.generate_final_output"""

    def setup_method(self):
        self.assembler = ResultAssembler()

    def test_sources_and_order(self, bill_text):
        amounts = [
            ClassifiedAmount(category='due', value=200),
            ClassifiedAmount(category='total_bill', value=1200),
            ClassifiedAmount(category='paid', value=1000),
        ]

        result = self.assembler.generate_final_output(bill_text, 'INR', amounts)

        assert result.status == PipelineStatus.OK
        assert [a.category for a in result.amounts] == [
            AmountCategory.TOTAL_BILL, AmountCategory.PAID, AmountCategory.DUE
        ]
        for amount in result.amounts:
            assert amount.source.startswith("text: '")
            assert format_amount(amount.value) in amount.source

    def test_source_window_is_trimmed(self):
        text = "x" * 80 + " Total 450 " + "y" * 80
        result = self.assembler.generate_final_output(text, 'INR', [
            ClassifiedAmount(category='total_bill', value=450)
        ])
        snippet = result.amounts[0].source[len("text: '"):-1]
        assert len(snippet) <= 50 + 3 + 50
        assert snippet == snippet.strip()

    def test_missing_value_source(self):
        result = self.assembler.generate_final_output("Total 100", 'USD', [
            ClassifiedAmount(category='other', value=12.5)
        ])

        assert result.currency == 'USD'
        assert result.amounts[0].source == "value: 12.5"

    def test_internal_failure_returns_error_result(self):
        amounts = [ClassifiedAmount(category='paid', value=10)]
        with patch.object(ResultAssembler, 'build_source', side_effect=RuntimeError("boom")):
            result = self.assembler.generate_final_output("Paid 10", 'USD', amounts)

        assert result.to_dict() == {'currency': 'INR', 'amounts': [], 'status': 'error'}

    def test_wire_format(self):
        result = self.assembler.generate_final_output("Paid 10", 'INR', [
            ClassifiedAmount(category='paid', value=10, entity='Paid', confidence=0.9)
        ])
        assert result.to_dict() == {
            'currency': 'INR',
            'amounts': [{'type': 'paid', 'value': 10.0, 'source': "text: 'Paid 10'"}],
            'status': 'ok'
        }
