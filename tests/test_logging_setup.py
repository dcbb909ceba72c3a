import logging

from fractalzoom.util.logging_setup import configure_logging, get_logger, shutdown_logging

def test_child_loggers_write_to_package_file(tmp_path):
    path = tmp_path / "render.log"
    logger = configure_logging(level=logging.DEBUG, console=False, log_file=str(path))
    try:
        assert logger.name == "fractalzoom"
        assert not logger.propagate
        get_logger("engine").debug("batch of %s points", 50)
        get_logger().info("top level")
    finally:
        shutdown_logging()
    text = path.read_text(encoding="utf-8")
    assert "DEBUG fractalzoom.engine [" in text
    assert "batch of 50 points" in text
    assert "INFO fractalzoom [" in text
    assert not logger.handlers

def test_reconfigure_replaces_handlers(tmp_path, capsys):
    configure_logging(console=True, log_file=str(tmp_path / "a.log"))
    logger = configure_logging(level=logging.WARNING, console=True, log_file=None)
    try:
        assert len(logger.handlers) == 1
        get_logger("session").info("hidden")
        get_logger("session").warning("shown")
    finally:
        shutdown_logging()
    err = capsys.readouterr().err
    assert "WARNING fractalzoom.session: shown" in err
    assert "hidden" not in err
