"""
Tests for the Typer CLI, using mock busy data and patched webhooks.
"""

import json
from unittest.mock import MagicMock, patch

import requests
from typer.testing import CliRunner

from meetscheduler import __version__
from meetscheduler.cli.app import app

runner = CliRunner()

# A Monday far enough ahead that no slot is in the past
DAY = "2099-01-05"


def _config(tmp_path, extra: str = "") -> str:
    busy_file = tmp_path / "busy.json"
    busy_file.write_text(json.dumps([
        {"inicio": f"{DAY}T12:00:00+01:00", "fin": f"{DAY}T13:00:00+01:00"},
    ]), encoding="utf-8")

    path = tmp_path / "config.yaml"
    path.write_text(
        'timezone: "Europe/Madrid"\n'
        f'mock_data_file: "{busy_file.name}"\n' + extra,
        encoding="utf-8",
    )
    return str(path)


def test_slots_with_mock_data(tmp_path):
    result = runner.invoke(app, ["slots", DAY, "--mock", "--config", _config(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "16 horario(s)" in result.output
    assert "11:30 – 12:00" in result.output
    assert "12:00 – 12:30" not in result.output


def test_slots_sixty_minutes(tmp_path):
    result = runner.invoke(app, ["slots", DAY, "--mock", "-d", "60", "--config", _config(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "14 horario(s)" in result.output


def test_slots_rejects_unsupported_duration(tmp_path):
    result = runner.invoke(app, ["slots", DAY, "--mock", "-d", "45", "--config", _config(tmp_path)])

    assert result.exit_code == 1


def test_slots_rejects_bad_date(tmp_path):
    result = runner.invoke(app, ["slots", "05/01/2099", "--mock", "--config", _config(tmp_path)])

    assert result.exit_code == 1


def test_slots_without_availability_webhook(tmp_path):
    result = runner.invoke(app, ["slots", DAY, "--config", _config(tmp_path)])

    assert result.exit_code == 1
    assert "availability_url" in result.output


def test_missing_config_file(tmp_path):
    result = runner.invoke(app, ["slots", DAY, "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1


@patch("meetscheduler.adapters.booking_client.requests.post")
def test_book_command(mock_post, tmp_path):
    response = MagicMock()
    response.ok = True
    response.json.return_value = {"meetingLink": "https://meet.google.com/abc-defg-hij"}
    mock_post.return_value = response
    config = _config(tmp_path, 'webhooks:\n  booking_url: "https://hooks.acme.io/book"\n')

    result = runner.invoke(app, [
        "book",
        "--name", "Ana",
        "--last-name", "Ruiz",
        "--email", "ana.ruiz@acme.io",
        "--start", f"{DAY} 10:00",
        "--duration", "60",
        "--config", config,
    ])

    assert result.exit_code == 0, result.output
    assert "https://meet.google.com/abc-defg-hij" in result.output
    payload = mock_post.call_args.kwargs["json"]
    assert payload["inicio"] == f"{DAY} 10:00"
    assert payload["final"] == f"{DAY} 11:00"


def test_book_with_invalid_data_fails(tmp_path):
    config = _config(tmp_path, 'webhooks:\n  booking_url: "https://hooks.acme.io/book"\n')

    result = runner.invoke(app, [
        "book",
        "--name", "A",
        "--last-name", "Ruiz",
        "--email", "ana.ruiz@acme.io",
        "--start", f"{DAY} 10:00",
        "--config", config,
    ])

    assert result.exit_code == 1
    assert "Datos inválidos." in result.output


def test_schedule_wizard_books_chosen_slot(tmp_path):
    booking_url = 'webhooks:\n  booking_url: "https://hooks.acme.io/book"\n'
    answers = "\n".join([
        "1",            # short meeting
        DAY,            # day
        "2",            # second slot: 09:30
        "Ana",
        "Ruiz",
        "ana.ruiz@acme.io",
        "",             # no notes
    ]) + "\n"

    with patch("meetscheduler.adapters.booking_client.requests.post") as mock_post:
        response = MagicMock()
        response.ok = True
        response.json.return_value = {}
        mock_post.return_value = response

        result = runner.invoke(
            app,
            ["schedule", "--mock", "--config", _config(tmp_path, booking_url)],
            input=answers,
        )

    assert result.exit_code == 0, result.output
    assert "Reserva confirmada" in result.output
    assert mock_post.call_args.kwargs["json"]["inicio"] == f"{DAY} 09:30"


def test_suggest_requires_api_key(tmp_path):
    result = runner.invoke(app, ["suggest", "--config", _config(tmp_path)])

    assert result.exit_code == 1
    assert "api_key" in result.output


SUGGESTIONS = (
    'suggestions:\n'
    '  api_key: "secret"\n'
    '  api_url: "https://llm.acme.io/v1"\n'
    '  timezones: ["America/New_York", "Asia/Tokyo"]\n'
)

BOOKING = 'webhooks:\n  booking_url: "https://hooks.acme.io/book"\n'


def _llm_response(items):
    response = MagicMock()
    response.ok = True
    response.json.return_value = {
        "choices": [{"message": {"content": json.dumps(items)}}]
    }
    return response


def _fake_post(suggested):
    """Route chat completion calls and booking calls to separate canned replies."""
    booking = MagicMock()
    booking.ok = True
    booking.json.return_value = {"meetingLink": "https://meet.google.com/abc-defg-hij"}

    def post(url, **kwargs):
        if url.endswith("/chat/completions"):
            if isinstance(suggested, Exception):
                raise suggested
            return _llm_response(suggested)
        return booking

    return post


def test_suggest_rejects_unlisted_timezone(tmp_path):
    result = runner.invoke(app, [
        "suggest", "--user-tz", "Europe/London", "--config", _config(tmp_path, SUGGESTIONS),
    ])

    assert result.exit_code == 1
    assert "America/New_York" in result.output


def test_suggest_with_listed_timezone(tmp_path):
    suggested = [{"start": f"{DAY}T15:00:00", "end": f"{DAY}T15:30:00"}]

    with patch("requests.post", side_effect=_fake_post(suggested)) as mock_post:
        result = runner.invoke(app, [
            "suggest", "--user-tz", "Asia/Tokyo", "--config", _config(tmp_path, SUGGESTIONS),
        ])

    assert result.exit_code == 0, result.output
    assert "Sugerencias IA" in result.output
    assert "15:00 – 15:30" in result.output
    prompt = mock_post.call_args.kwargs["json"]["messages"][0]["content"]
    assert "User's time zone: Asia/Tokyo" in prompt
    assert "Host's time zone: Europe/Madrid" in prompt


def test_schedule_wizard_books_suggested_slot(tmp_path):
    suggested = [
        {"start": "2000-01-03T10:00:00", "end": "2000-01-03T10:30:00"},
        {"start": f"{DAY}T16:00:00", "end": f"{DAY}T17:00:00"},
    ]
    answers = "\n".join([
        "1",            # short meeting
        "y",            # show suggestions
        "3",            # Asia/Tokyo (host timezone is listed first)
        "1",            # first suggestion still in the future
        "Ana",
        "Ruiz",
        "ana.ruiz@acme.io",
        "Revisar contrato",
    ]) + "\n"

    with patch("requests.post", side_effect=_fake_post(suggested)) as mock_post:
        result = runner.invoke(
            app,
            ["schedule", "--mock", "--config", _config(tmp_path, BOOKING + SUGGESTIONS)],
            input=answers,
        )

    assert result.exit_code == 0, result.output
    assert "1 sugerencia(s)" in result.output
    assert "Reserva confirmada" in result.output
    payload = mock_post.call_args.kwargs["json"]
    assert payload["inicio"] == f"{DAY} 16:00"
    assert payload["final"] == f"{DAY} 16:30"
    assert payload["notas"] == "Revisar contrato"
    llm_prompt = mock_post.call_args_list[0].kwargs["json"]["messages"][0]["content"]
    assert "User's time zone: Asia/Tokyo" in llm_prompt


def test_schedule_wizard_falls_back_to_day_picker(tmp_path):
    answers = "\n".join([
        "1",            # short meeting
        "y",            # show suggestions
        "1",            # host timezone
        DAY,            # day, after the suggestion service failed
        "2",            # second slot: 09:30
        "Ana",
        "Ruiz",
        "ana.ruiz@acme.io",
        "",
    ]) + "\n"
    failure = requests.exceptions.ConnectionError("down")

    with patch("requests.post", side_effect=_fake_post(failure)) as mock_post:
        result = runner.invoke(
            app,
            ["schedule", "--mock", "--config", _config(tmp_path, BOOKING + SUGGESTIONS)],
            input=answers,
        )

    assert result.exit_code == 0, result.output
    assert "No se encontraron sugerencias." in result.output
    assert mock_post.call_args.kwargs["json"]["inicio"] == f"{DAY} 09:30"


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
