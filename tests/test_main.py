# tests/test_main.py
import logging
from unittest.mock import ANY, MagicMock, patch

import pytest

from sharefile_fs.adapter import SharefileAdapter
from sharefile_fs.exceptions import UnableToDeleteFile
from sharefile_fs.main import build_parser, initialize_adapter, main, run_command, setup_logging
from sharefile_fs.storage.dto import FileMetadata


def _metadata(path, type_="file", size=0):
    return FileMetadata(
        path=path,
        mimetype="text/plain",
        dirname="",
        extension="",
        filename=path,
        basename=path,
        type=type_,
        size=size,
    )


def _run(adapter, *argv):
    return run_command(adapter, build_parser().parse_args(list(argv)))


@patch("sharefile_fs.main.sharefile_client_from_settings")
def test_initialize_adapter_success(mock_client_factory, mock_settings):
    """
    Ensures initialize_adapter wires the client and the settings into the adapter.
    """
    adapter = initialize_adapter(mock_settings)

    assert isinstance(adapter, SharefileAdapter)
    assert adapter.get_client() is mock_client_factory.return_value
    assert adapter.path_prefix == "unittest"
    assert adapter.return_sharefile_item is False
    assert adapter.stream_timeout == 5
    mock_client_factory.assert_called_once_with(mock_settings)


@patch("sharefile_fs.main.sharefile_client_from_settings")
@patch("sharefile_fs.main.logging")
def test_initialize_adapter_client_error(MockLogging, mock_client_factory, mock_settings):
    """
    Ensures initialize_adapter returns None when the client cannot be created.
    """
    mock_client_factory.side_effect = RuntimeError("no session")

    assert initialize_adapter(mock_settings) is None
    MockLogging.error.assert_called_once_with(
        "Failed to initialize ShareFile client. Error: no session", exc_info=True
    )


@patch("sharefile_fs.main.logging.FileHandler")
def test_setup_logging_adds_file_handler(MockFileHandler, mock_settings):
    root_logger = logging.getLogger()
    saved_handlers, saved_level = list(root_logger.handlers), root_logger.level
    try:
        setup_logging()

        MockFileHandler.assert_called_once_with(mock_settings.LOG_FILE)
        assert MockFileHandler.return_value in root_logger.handlers
        assert root_logger.level == logging.INFO
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        root_logger.handlers[:] = saved_handlers
        root_logger.setLevel(saved_level)


def test_ls_prints_entries(capsys):
    adapter = MagicMock()
    adapter.list_contents.return_value = [_metadata("docs", "dir"), _metadata("a.txt", size=12)]

    assert _run(adapter, "ls", "-r", "unittest") == 0

    adapter.list_contents.assert_called_once_with("unittest", recursive=True)
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("d ") and lines[0].endswith(" docs")
    assert lines[1].startswith("- ") and lines[1].endswith(" 12 a.txt")


def test_stat_prints_metadata(capsys):
    adapter = MagicMock()
    adapter.get_metadata.return_value = _metadata("a.txt", size=3)

    assert _run(adapter, "stat", "a.txt") == 0
    assert '"path": "a.txt"' in capsys.readouterr().out


def test_stat_missing_item(capsys):
    adapter = MagicMock()
    adapter.get_metadata.return_value = None

    assert _run(adapter, "stat", "missing.txt") == 1
    assert "missing.txt: not found" in capsys.readouterr().err


def test_cat_writes_chunks_to_stdout(capsysbinary):
    adapter = MagicMock()
    stream = adapter.read_stream.return_value.__enter__.return_value
    stream.iter_chunks.return_value = [b"hel", b"lo"]

    assert _run(adapter, "cat", "a.txt") == 0
    assert capsysbinary.readouterr().out == b"hello"
    adapter.read_stream.return_value.__exit__.assert_called_once()


def test_get_downloads_to_local_file(tmp_path):
    adapter = MagicMock()
    stream = adapter.read_stream.return_value.__enter__.return_value
    stream.read.side_effect = [b"data", b""]
    local = tmp_path / "a.txt"

    assert _run(adapter, "get", "docs/a.txt", str(local)) == 0
    assert local.read_bytes() == b"data"


def test_put_uploads_local_file(tmp_path):
    adapter = MagicMock()
    local = tmp_path / "a.txt"
    local.write_bytes(b"data")

    assert _run(adapter, "put", str(local), "docs/a.txt") == 0
    adapter.write_stream.assert_called_once_with("docs/a.txt", ANY)


@pytest.mark.parametrize(
    "argv, method, expected_args",
    [
        (["mkdir", "docs/new"], "create_directory", ("docs/new",)),
        (["rm", "docs/a.txt"], "delete", ("docs/a.txt",)),
        (["rm", "--dir", "docs"], "delete_directory", ("docs",)),
        (["cp", "docs/a.txt", "archive/a.txt"], "copy", ("docs/a.txt", "archive/a.txt")),
        (["mv", "docs/a.txt", "archive/a.txt"], "move", ("docs/a.txt", "archive/a.txt")),
    ],
)
def test_commands_dispatch_to_adapter(argv, method, expected_args):
    adapter = MagicMock()

    assert _run(adapter, *argv) == 0
    getattr(adapter, method).assert_called_once_with(*expected_args)


@patch("sharefile_fs.main.setup_logging")
@patch("sharefile_fs.main.initialize_adapter")
def test_main_reports_filesystem_errors(mock_initialize, mock_setup_logging, capsys):
    """
    Ensures a failing operation prints its message and exits with 1.
    """
    adapter = mock_initialize.return_value
    adapter.delete.side_effect = UnableToDeleteFile.at_location("a.txt", "Access forbidden.")

    assert main(["rm", "a.txt"]) == 1
    assert "Unable to delete file located at: a.txt. Access forbidden." in capsys.readouterr().err
    mock_setup_logging.assert_called_once()


@patch("sharefile_fs.main.setup_logging")
@patch("sharefile_fs.main.initialize_adapter", return_value=None)
def test_main_without_adapter(mock_initialize, mock_setup_logging, mock_settings):
    assert main(["ls"]) == 1
    mock_initialize.assert_called_once_with(mock_settings)
