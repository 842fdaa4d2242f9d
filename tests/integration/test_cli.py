"""Integration tests for the leadrelay command line"""

import json

import pytest

from leadrelay.cli import build_parser, load_agent_seed, main
from leadrelay.domain.mailbox.ports import MailTransportError


class TestRunOnceCommand:
    """Test leadrelay run-once exit codes and output"""

    def test_completed_run_exits_zero(self, seeded_services, mailbox, capsys):
        mailbox.add("1", text="Email: ann@example.com")
        mailbox.add("2", text="no address")

        exit_code = main(["run-once"], services=seeded_services)

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "Processed:  3" in out
        assert "Successful: 1" in out
        assert "Failed:     2" in out
        assert "Retried:    1" in out

    def test_lock_held_exits_zero(self, seeded_services, capsys):
        seeded_services.lock.acquire("other-worker")

        assert main(["run-once"], services=seeded_services) == 0
        assert "already running" in capsys.readouterr().out

    def test_lost_lock_reported(self, seeded_services, mailbox, settings, monkeypatch, capsys):
        settings.LOCK_TTL_SECONDS = 0
        monkeypatch.setattr(seeded_services.lock, "extend", lambda holder_id, name=None: False)
        mailbox.add("1", text="Email: ann@example.com")
        mailbox.add("2", text="Email: bea@example.com")

        assert main(["run-once"], services=seeded_services) == 0

        out = capsys.readouterr().out
        assert "Processed:  1" in out
        assert "Run lock was lost" in out

    def test_fatal_error_exits_one(self, seeded_services, mailbox, capsys):
        mailbox.list_error = MailTransportError("IMAP down")

        assert main(["run-once"], services=seeded_services) == 1
        assert "MailTransportError" in capsys.readouterr().out


class TestProcessOneCommand:
    """Test manual replay from the command line"""

    def test_replay_success(self, seeded_services, mailbox, outbound, capsys):
        mailbox.add("1", text="Email: ann@example.com")
        main(["run-once"], services=seeded_services)
        capsys.readouterr()

        assert main(["process-one", "1"], services=seeded_services) == 0

        out = capsys.readouterr().out
        assert "processed (attempt 2)" in out
        assert len(outbound.sent) == 1

    def test_replay_failure_still_exits_zero(self, seeded_services, mailbox, capsys):
        mailbox.add("1", text="no address")

        assert main(["process-one", "1"], services=seeded_services) == 0
        assert "LeadParseError" in capsys.readouterr().out


class TestStatusCommand:
    """Test the status report"""

    def test_status_output(self, seeded_services, mailbox, capsys):
        mailbox.add("1", text="Name: Ann Lee\nEmail: ann@example.com")
        mailbox.add("2", text="no address")
        seeded_services.coordinator.run()
        capsys.readouterr()

        assert main(["status"], services=seeded_services) == 0

        out = capsys.readouterr().out
        assert "Success rate: 50.0%" in out
        assert "Alice Agent: 1 leads" in out
        assert "Bob Broker: 0 leads, last never" in out
        assert "ann@example.com [generic] Ann Lee, replied" in out
        assert "2 (2 attempts)" in out

    def test_status_without_agents(self, services, capsys):
        assert main(["status"], services=services) == 0
        assert "run seed-agents first" in capsys.readouterr().out


class TestSeedAgentsCommand:
    """Test roster seeding from JSON"""

    def test_seed_list(self, services, tmp_path, capsys):
        path = tmp_path / "agents.json"
        path.write_text(json.dumps([
            {"name": "Alice", "email": "Alice@Agency.example", "bookingUrl": "https://cal.example/alice"},
            {"name": "Bob", "email": "bob@agency.example", "is_active": False},
        ]))

        assert main(["seed-agents", str(path)], services=services) == 0

        agents = {a.email: a for a in services.roster.list_all()}
        assert agents["alice@agency.example"].booking_url == "https://cal.example/alice"
        assert agents["bob@agency.example"].is_active is False
        assert "Seeded 2 of 2 agents" in capsys.readouterr().out

    def test_seed_is_idempotent(self, services, tmp_path, capsys):
        path = tmp_path / "agents.json"
        path.write_text(json.dumps({"agents": [{"name": "Alice", "email": "alice@agency.example"}]}))

        main(["seed-agents", str(path)], services=services)
        main(["seed-agents", str(path)], services=services)

        assert len(services.roster.list_all()) == 1
        assert "Agent already exists: alice@agency.example" in capsys.readouterr().out

    def test_invalid_seed_file(self, services, tmp_path, capsys):
        path = tmp_path / "agents.json"
        path.write_text(json.dumps([{"name": "Alice", "email": "not-an-email"}]))

        assert main(["seed-agents", str(path)], services=services) == 1
        assert "Invalid seed file" in capsys.readouterr().out
        assert services.roster.list_all() == []

    def test_missing_seed_file(self, tmp_path):
        with pytest.raises(ValueError):
            load_agent_seed(tmp_path / "missing.json")


class TestParser:
    """Test argument parsing"""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_process_one_requires_id(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["process-one"])
