from pathlib import Path
from unittest.mock import MagicMock, call

import pytest
import requests

from provisioner.steps.database import fetch_dump, import_database, snapshot_reference


def _session(chunks=(b"new ", b"snapshot"), status_error=None):
    response = MagicMock()
    response.status_code = 401 if status_error else 200
    response.iter_content.return_value = list(chunks)
    if status_error:
        response.raise_for_status.side_effect = status_error
    session = MagicMock()
    session.get.return_value = response
    return session


def test_fetch_dump_downloads_with_basic_auth(make_settings, project_root, mock_logger):
    settings = make_settings()
    session = _session()

    path = fetch_dump(settings, mock_logger, session=session)

    assert path == project_root / "dump" / "database.sql.gz"
    assert path.read_bytes() == b"new snapshot"
    session.get.assert_called_once_with(
        "https://backups.example.com/site.sql.gz",
        auth=("reader", "s3cret"),
        stream=True,
        timeout=300,
    )
    # No temporary files left next to the snapshot.
    assert sorted(p.name for p in path.parent.iterdir()) == ["database.sql.gz"]


def test_fetch_dump_without_user_sends_no_auth(make_settings, mock_logger):
    settings = make_settings(dump={"url": "https://public.example.com/db.sql.gz"})
    session = _session()

    fetch_dump(settings, mock_logger, session=session)

    assert session.get.call_args.kwargs["auth"] is None


def test_fetch_dump_uses_requests_by_default(mocker, make_settings, mock_logger):
    mock_get = mocker.patch("requests.get", return_value=_session().get.return_value)

    fetch_dump(make_settings(), mock_logger)

    mock_get.assert_called_once()


def test_fetch_dump_http_error_keeps_old_snapshot(make_settings, project_root, mock_logger):
    session = _session(status_error=requests.exceptions.HTTPError("401 Unauthorized"))

    with pytest.raises(requests.exceptions.HTTPError):
        fetch_dump(make_settings(), mock_logger, session=session)

    dump_dir = project_root / "dump"
    assert (dump_dir / "database.sql.gz").read_bytes() == b"old snapshot"
    assert [p.name for p in dump_dir.iterdir()] == ["database.sql.gz"]
    assert "Status code: 401" in mock_logger.error.call_args[0][0]


def test_fetch_dump_interrupted_transfer_leaves_no_partial_file(
    make_settings, project_root, mock_logger
):
    session = _session()
    session.get.return_value.iter_content.side_effect = (
        requests.exceptions.ConnectionError("reset by peer")
    )

    with pytest.raises(requests.exceptions.ConnectionError):
        fetch_dump(make_settings(), mock_logger, session=session)

    dump_dir = project_root / "dump"
    assert [p.name for p in dump_dir.iterdir()] == ["database.sql.gz"]
    assert (dump_dir / "database.sql.gz").read_bytes() == b"old snapshot"


def test_fetch_dump_requires_url(make_settings, mock_logger):
    with pytest.raises(ValueError):
        fetch_dump(make_settings(dump={"url": None}), mock_logger, session=_session())


def test_import_database_fetches_then_loads(mocker, make_settings, fake_tools, tool_calls, mock_logger):
    settings = make_settings()
    mock_fetch = mocker.patch("provisioner.steps.database.fetch_dump")

    import_database(fake_tools, app_settings=settings, current_logger=mock_logger)

    mock_fetch.assert_called_once_with(settings, mock_logger)
    assert tool_calls.mock_calls == [
        call.site_cli.sql_drop(),
        call.site_cli.sql_import("dump/database.sql.gz"),
    ]


def test_import_database_skip_fetch_uses_local_snapshot(
    mocker, make_settings, fake_tools, tool_calls, mock_logger
):
    mock_fetch = mocker.patch("provisioner.steps.database.fetch_dump")
    mock_get = mocker.patch("requests.get")

    import_database(
        fake_tools,
        app_settings=make_settings(skip_dump_fetch=True),
        current_logger=mock_logger,
    )

    mock_fetch.assert_not_called()
    mock_get.assert_not_called()
    fake_tools.site_cli.sql_import.assert_called_once_with("dump/database.sql.gz")


def test_import_database_missing_snapshot_fails(
    make_settings, project_root, fake_tools, mock_logger
):
    (project_root / "dump" / "database.sql.gz").unlink()

    with pytest.raises(FileNotFoundError):
        import_database(
            fake_tools,
            app_settings=make_settings(skip_dump_fetch=True),
            current_logger=mock_logger,
        )

    fake_tools.site_cli.sql_drop.assert_not_called()


def test_snapshot_reference_outside_project_is_absolute(make_settings):
    settings = make_settings(dump={"path": "/var/backups/db.sql.gz"})

    assert snapshot_reference(settings) == str(Path("/var/backups/db.sql.gz"))
