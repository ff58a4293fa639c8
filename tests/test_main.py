"""
Tests for the command line interface.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest
import yaml
from click.testing import CliRunner

from domain_expiry import main as cli_module
from domain_expiry.main import cli, create_adhoc_config
from domain_expiry.config import ConsoleNotifierConfig
from domain_expiry.sources import StaticSource


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({
        "alarm_days": 30,
        "ssl_alarm_days": 14,
        "notifiers": {"console": {}},
        "check_interval_hours": 12,
    }), encoding="utf-8")
    return path


def close_coroutine(coro):
    coro.close()


class TestRunCommand:
    """Tests for the run command."""

    def test_single_shot(self, runner, config_file):
        with patch.object(cli_module, 'setup_logging') as mock_logging, \
             patch.object(cli_module, 'run_once', Mock(return_value=Mock())) as mock_run_once, \
             patch.object(cli_module.asyncio, 'run') as mock_run:
            result = runner.invoke(cli, ['run', '-c', str(config_file), '--single-shot'])

        assert result.exit_code == 0, result.output
        mock_logging.assert_called_once()
        mock_run_once.assert_called_once()
        mock_run.assert_called_once_with(mock_run_once.return_value)

    def test_periodic_uses_interval(self, runner, config_file):
        with patch.object(cli_module, 'setup_logging'), \
             patch.object(cli_module, 'run_periodic', Mock(return_value=Mock())) as mock_periodic, \
             patch.object(cli_module.asyncio, 'run'):
            result = runner.invoke(cli, ['run', '-c', str(config_file)])

        assert result.exit_code == 0, result.output
        assert mock_periodic.call_args[0][1] == 12

    def test_log_level_override(self, runner, config_file):
        with patch.object(cli_module, 'setup_logging') as mock_logging, \
             patch.object(cli_module, 'run_once', Mock(return_value=Mock())), \
             patch.object(cli_module.asyncio, 'run'):
            runner.invoke(cli, ['run', '-c', str(config_file), '--single-shot', '--log-level', 'DEBUG'])

        assert mock_logging.call_args[0][0].log_level == "debug"

    def test_configuration_error(self, runner, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("ssl_alarm_days: 3\n", encoding="utf-8")

        result = runner.invoke(cli, ['run', '-c', str(path)])

        assert result.exit_code != 0
        assert "Configuration error" in result.output

    def test_unexpected_error_exits_nonzero(self, runner, config_file):
        with patch.object(cli_module, 'setup_logging'), \
             patch.object(cli_module, 'run_once', Mock(return_value=Mock())), \
             patch.object(cli_module.asyncio, 'run', side_effect=RuntimeError("boom")):
            result = runner.invoke(cli, ['run', '-c', str(config_file), '--single-shot'])

        assert result.exit_code == 1


class TestCheckCommand:
    """Tests for the ad-hoc check command."""

    def test_adhoc_config(self):
        config = create_adhoc_config(30, 14, "en", "warning")

        assert config.notifiers == {"console": ConsoleNotifierConfig()}
        assert config.sources == {}
        assert config.log_config.use_color is True

    def test_check_runs_static_source(self, runner):
        executor = Mock()
        executor.run = AsyncMock()

        with patch.object(cli_module, 'setup_logging'), \
             patch.object(cli_module.Services, 'domain_checker', return_value=executor) as mock_checker, \
             patch.object(cli_module.asyncio, 'run', side_effect=close_coroutine):
            result = runner.invoke(cli, ['check', '-d', 'example.com', '-d', 'www.example.org', '--language', 'RU'])

        assert result.exit_code == 0, result.output
        sources = mock_checker.call_args.kwargs['sources']
        assert len(sources) == 1
        assert isinstance(sources[0], StaticSource)
        assert sources[0].hostnames == ['example.com', 'www.example.org']

    def test_check_requires_domain(self, runner):
        result = runner.invoke(cli, ['check'])

        assert result.exit_code != 0
