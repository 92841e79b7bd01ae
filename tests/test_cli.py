"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

import librato_client.cli as cli_module
from librato_client import MetricsClient

CREDENTIALS = ["--user", "user@example.com", "--token", "secret-token"]


@pytest.fixture
def runner(monkeypatch, transport):
    """Create a CLI runner whose clients talk to the recording transport."""
    monkeypatch.setattr(
        cli_module, "MetricsClient",
        lambda user, token: MetricsClient(user, token, transport=transport),
    )
    return CliRunner()


def test_submit(runner, transport):
    """Test submitting a counter measurement."""
    result = runner.invoke(cli_module.cli, CREDENTIALS + ["submit", "--name", "requests", "--value", "2.5",
                                                          "--source", "web1"])
    assert result.exit_code == 0, result.output
    body = json.loads(transport.requests[0].content)
    assert body == {"counters": [{"name": "requests", "source": "web1", "value": "2.5"}]}


def test_submit_gauge(runner, transport):
    """Test submitting gauge statistics."""
    result = runner.invoke(cli_module.cli, CREDENTIALS + ["submit-gauge", "--name", "latency",
                                                          "--count", "4", "--sum", "10", "--max", "5"])
    assert result.exit_code == 0, result.output
    body = json.loads(transport.requests[0].content)
    assert body == {"gauges": [{"name": "latency", "count": 4, "sum": 10.0, "max": 5.0}]}


def test_submit_csv(runner, transport, tmp_path):
    """Test submitting a CSV file as a single batch."""
    path = tmp_path / "measurements.csv"
    path.write_text(
        "type,name,value,count,sum,source\n"
        "counter,requests,3,,,web1\n"
        "gauge,latency,,2,7.5,web1\n"
    )

    result = runner.invoke(cli_module.cli, CREDENTIALS + ["submit-csv", str(path)])
    assert result.exit_code == 0, result.output
    assert "Submitted 2 measurements" in result.output
    assert len(transport.requests) == 1
    body = json.loads(transport.requests[0].content)
    assert body == {
        "counters": [{"name": "requests", "source": "web1", "value": "3.0"}],
        "gauges": [{"name": "latency", "source": "web1", "count": 2, "sum": 7.5}],
    }


def test_create_and_delete_metric(runner, transport):
    """Test the metric definition commands."""
    result = runner.invoke(cli_module.cli, CREDENTIALS + ["create-metric", "--name", "cpu",
                                                          "--type", "counter", "--period", "60"])
    assert result.exit_code == 0, result.output
    result = runner.invoke(cli_module.cli, CREDENTIALS + ["delete-metric", "--name", "cpu"])
    assert result.exit_code == 0, result.output

    put, delete = transport.requests
    assert put.method == "PUT" and put.url.path == "/v1/metrics/cpu"
    assert json.loads(put.content) == {"type": "counter", "period": 60}
    assert delete.method == "DELETE" and delete.content == b""


def test_credentials_from_environment(runner, transport):
    """Test that credentials are read from the environment."""
    result = runner.invoke(
        cli_module.cli, ["delete-metric", "--name", "cpu"],
        env={"LIBRATO_USER": "env-user", "LIBRATO_TOKEN": "env-token"},
    )
    assert result.exit_code == 0, result.output
    assert len(transport.requests) == 1


def test_missing_credentials_reported(runner, transport):
    """Test that configuration errors become CLI errors."""
    result = runner.invoke(
        cli_module.cli, ["delete-metric", "--name", "cpu"],
        env={"LIBRATO_USER": "", "LIBRATO_TOKEN": ""},
    )
    assert result.exit_code == 1
    assert "User and API token are required" in result.output
    assert transport.requests == []
