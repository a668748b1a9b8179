"""Unit tests for the server entry point and logging setup."""

from unittest.mock import patch


class TestMain:
    """Test the uvicorn launcher."""

    def test_main_uses_configured_host_and_port(self, monkeypatch):
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setenv("PORT", "9001")
        monkeypatch.setenv("TIMEOUT_KEEP_ALIVE", "30")

        from bodyparse.__main__ import main

        with patch("bodyparse.__main__.uvicorn.run") as mock_run:
            main()

        mock_run.assert_called_once()
        args, kwargs = mock_run.call_args
        assert args == ("bodyparse.main:app",)
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9001
        assert kwargs["timeout_keep_alive"] == 30
        assert kwargs["reload"] is False


class TestLogging:
    """Test structured logging setup."""

    def test_setup_logging_quiets_uvicorn(self):
        import logging

        from bodyparse.shared.logging import setup_logging

        setup_logging()

        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_get_logger_binds_events(self):
        from bodyparse.shared.logging import get_logger

        logger = get_logger("bodyparse.test")

        assert hasattr(logger, "info")

    def test_setup_logging_accepts_explicit_settings(self, test_settings):
        import logging

        from bodyparse.shared.logging import setup_logging

        setup_logging(test_settings.model_copy(update={"app_env": "production"}))

        assert logging.getLogger("uvicorn.access").level == logging.WARNING
