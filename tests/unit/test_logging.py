"""Unit tests for logging configuration."""

from loguru import logger

from tabio.core.logging import configure_logging, get_logger, reset_logging
from tabio.io.importer import import_file
from tabio.io.registry import FormatRegistry


def register_something():
    """Emit a DEBUG record from tabio code."""
    FormatRegistry().register("foo", lambda path, **options: None)


class TestConfigureLogging:
    """Test configure_logging."""

    def test_file_sink(self, temp_dir):
        log_file = temp_dir / "logs" / "tabio.log"
        configure_logging(level="DEBUG", log_file=str(log_file), force=True)

        register_something()
        reset_logging()

        assert "Registered handlers for format 'foo'" in log_file.read_text()

    def test_codec_records_reach_file_sink(self, temp_dir, sample_csv):
        log_file = temp_dir / "tabio.log"
        configure_logging(level="DEBUG", log_file=str(log_file), force=True)

        import_file(sample_csv)
        reset_logging()

        assert "Detected encoding for sample.csv" in log_file.read_text()

    def test_other_libraries_filtered(self, temp_dir):
        log_file = temp_dir / "tabio.log"
        configure_logging(level="DEBUG", log_file=str(log_file), force=True)

        logger.info("not from tabio")
        register_something()
        reset_logging()

        text = log_file.read_text()
        assert "Registered handlers" in text
        assert "not from tabio" not in text

    def test_level(self, temp_dir):
        log_file = temp_dir / "tabio.log"
        configure_logging(level="INFO", log_file=str(log_file), force=True)
        register_something()
        reset_logging()
        assert "Registered handlers" not in log_file.read_text()

    def test_json_file(self, temp_dir):
        log_file = temp_dir / "tabio.json"
        configure_logging(level="DEBUG", log_file=str(log_file), serialize=True, force=True)
        register_something()
        reset_logging()
        assert '"message": "Registered handlers for format \'foo\'"' in log_file.read_text()

    def test_not_reconfigured_without_force(self, temp_dir):
        first = temp_dir / "first.log"
        second = temp_dir / "second.log"
        configure_logging(log_file=str(first), force=True)
        configure_logging(log_file=str(second))
        reset_logging()
        assert not second.exists()


def test_silent_until_configured():
    """Library records are dropped until logging is configured."""
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG")
    try:
        register_something()
    finally:
        logger.remove(handler_id)
    assert messages == []


def test_get_logger_binds_name():
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["extra"]), level="DEBUG")
    try:
        get_logger("my.module").info("hi")
    finally:
        logger.remove(handler_id)
    assert messages == [{"name": "my.module"}]
