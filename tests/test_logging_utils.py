import io
import logging

from nvim_bootstrap.logging_utils import SeverityTagFormatter, configure_logging


def _record(level, msg):
    return logging.LogRecord("x", level, __file__, 1, msg, None, None)


def test_severity_tags_plain():
    fmt = SeverityTagFormatter(color=False)
    assert fmt.format(_record(logging.INFO, "Installing")) == "[INFO] Installing"
    assert fmt.format(_record(logging.WARNING, "careful")) == "[WARN] careful"
    assert fmt.format(_record(logging.ERROR, "broken")) == "[ERROR] broken"


def test_severity_tags_colour():
    line = SeverityTagFormatter(color=True).format(_record(logging.INFO, "ok"))
    assert line.startswith("\033[0;32m[INFO]")


def test_configure_logging_writes_file_and_console(tmp_path):
    stream = io.StringIO()
    log_path = tmp_path / "logs" / "run.log"
    actual = configure_logging(str(log_path), stream=stream)

    logging.getLogger("nvim_bootstrap.test").info("hello")
    logging.getLogger("nvim_bootstrap.test").debug("details")

    assert actual == str(log_path)
    assert "[INFO] hello" in stream.getvalue()
    assert "details" not in stream.getvalue()
    assert "details" in log_path.read_text()
    # second call keeps the first configuration
    assert configure_logging(str(tmp_path / "other.log")) == str(log_path)
