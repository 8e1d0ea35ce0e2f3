"""
Tests for the AmountEx CLI
"""

import json

import yaml
from click.testing import CliRunner

from amountex.cli import cli

BILL_TEXT = "Total Bill Amount Rs.1200, Paid Rs.1000, Due Rs.200"


class TestExtractCommand:
    """Tests for `amountex extract`"""

    def test_extract_text(self):
        runner = CliRunner()
        result = runner.invoke(cli, ['extract', BILL_TEXT])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data['status'] == 'ok'
        assert [a['type'] for a in data['amounts']] == ['total_bill', 'paid', 'due']

    def test_extract_file(self, tmp_path):
        path = tmp_path / 'bill.txt'
        path.write_text("Grand Total $45.50", encoding='utf-8')

        result = CliRunner().invoke(cli, ['extract', '--file', str(path), '--pretty'])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data['currency'] == 'USD'
        assert data['amounts'][0]['value'] == 45.5

    def test_extract_guardrail(self):
        result = CliRunner().invoke(cli, ['extract', 'see page 2 of 5'])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {'currency': 'INR', 'amounts': [], 'status': 'error'}

    def test_empty_input(self):
        result = CliRunner().invoke(cli, ['extract', '   '])

        assert result.exit_code == 1
        assert 'Text input is required' in result.output


class TestStageCommand:
    """Tests for `amountex stage`"""

    def test_stage_two(self):
        result = CliRunner().invoke(cli, ['stage', '2', BILL_TEXT])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data['normalized_amounts']['normalized_amounts'] == [1200.0, 1000.0, 200.0]
        assert data['classified_amounts'] is None

    def test_stage_out_of_range(self):
        result = CliRunner().invoke(cli, ['stage', '7', BILL_TEXT])
        assert result.exit_code != 0


class TestConfigCommands:
    """Tests for `amountex config`"""

    def test_show(self):
        result = CliRunner().invoke(cli, ['config', 'show'])

        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)['llm']['provider'] == 'none'

    def test_init_writes_file(self, tmp_path):
        target = tmp_path / 'config.yaml'
        result = CliRunner().invoke(cli, ['config', 'init', '--provider', 'ollama', '--model', 'mistral', '--path', str(target)])

        assert result.exit_code == 0
        saved = yaml.safe_load(target.read_text())
        assert saved['llm']['provider'] == 'ollama'
        assert saved['llm']['model'] == 'mistral'
