"""Tests for the command line entry point."""

from unittest import mock

from GRE import cli
from GRE.config import ConfigError, Settings


class TestServe:
    def test_default_command_serves(self):
        settings = Settings(token="t")
        with mock.patch.object(cli, "load_settings", return_value=settings), \
             mock.patch.object(cli, "serve") as serve:
            assert cli.main([]) == 0
        serve.assert_called_once_with(settings)

    def test_flags_override_settings(self):
        settings = Settings(token="t")
        with mock.patch.object(cli, "load_settings", return_value=settings), \
             mock.patch.object(cli, "serve") as serve:
            assert cli.main(["serve", "--host", "0.0.0.0", "--port", "9001"]) == 0
        served = serve.call_args.args[0]
        assert served.host == "0.0.0.0"
        assert served.port == 9001

    def test_config_error_exit_code(self, capsys):
        with mock.patch.object(cli, "load_settings", side_effect=ConfigError("GRE_PORT bad")), \
             mock.patch.object(cli, "serve") as serve:
            assert cli.main(["serve"]) == 2
        serve.assert_not_called()
        assert "GRE_PORT bad" in capsys.readouterr().err


class TestToken:
    def test_set(self, capsys):
        with mock.patch.object(cli.token_store, "is_available", return_value=True), \
             mock.patch.object(cli.token_store, "save", return_value=True) as save:
            assert cli.main(["token", "set", " ghp_abc "]) == 0
        save.assert_called_once_with("ghp_abc")
        assert "Token saved." in capsys.readouterr().out

    def test_clear_without_saved_token(self, capsys):
        with mock.patch.object(cli.token_store, "is_available", return_value=True), \
             mock.patch.object(cli.token_store, "delete", return_value=False):
            assert cli.main(["token", "clear"]) == 0
        assert "No saved token." in capsys.readouterr().out

    def test_keychain_unavailable(self):
        with mock.patch.object(cli.token_store, "is_available", return_value=False):
            assert cli.main(["token", "clear"]) == 1
