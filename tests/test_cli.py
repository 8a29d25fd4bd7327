"""
guildjournal/tests/test_cli.py

Tests for the command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from guildjournal.cli import cli
from guildjournal.protocol.council import CouncilStatus, RequestKind
from guildjournal.protocol.events import SubmitPartnership
from guildjournal.protocol.storage import FileBackend, SnapshotStore
from guildjournal.store import GuildStore


@pytest.fixture
def runner(monkeypatch):
    for name in ("GUILD_API_KEY", "GEMINI_API_KEY", "GUILD_STORAGE_DIR", "GUILD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


def invoke(runner, tmp_path, *args):
    return runner.invoke(cli, ["--storage-dir", str(tmp_path), *args], obj={})


def create_test_request(tmp_path):
    """Persist a journal with one pending partnership request."""
    store = GuildStore(snapshot_store=SnapshotStore(FileBackend(tmp_path)))
    store.load()
    store.dispatch(SubmitPartnership(partner_name="River Trust", partner_type="Institution"))
    return store.pending_requests(RequestKind.PARTNERSHIP)[0].id


class TestStatus:
    """Test the status command."""

    def test_status_new_journal(self, runner, tmp_path):
        """Test status on an empty directory shows the seeded member."""
        result = invoke(runner, tmp_path, "status")
        assert result.exit_code == 0
        assert "The Seeker" in result.output
        assert "Tier: Seeker" in result.output
        assert "Pending council requests: 0" in result.output

    def test_status_counts_requests(self, runner, tmp_path):
        """Test status lists request kinds with entries."""
        create_test_request(tmp_path)
        result = invoke(runner, tmp_path, "status")
        assert "partnership: 1 pending / 1 total" in result.output


    def test_new_journal_is_saved(self, runner, tmp_path):
        """Test the first run persists the seeded member so the id stays stable."""
        first = invoke(runner, tmp_path, "status")
        second = invoke(runner, tmp_path, "status")
        saved = SnapshotStore(FileBackend(tmp_path)).load_snapshot()
        assert saved is not None
        assert f"({saved.user.id})" in first.output
        assert f"({saved.user.id})" in second.output


class TestPending:
    """Test the pending command."""

    def test_no_pending(self, runner, tmp_path):
        """Test an empty queue."""
        result = invoke(runner, tmp_path, "pending")
        assert result.exit_code == 0
        assert "No pending requests." in result.output

    def test_lists_pending(self, runner, tmp_path):
        """Test pending requests are listed with kind and id."""
        request_id = create_test_request(tmp_path)
        result = invoke(runner, tmp_path, "pending", "--kind", "partnership")
        assert f"partnership\t{request_id}" in result.output

    def test_bad_kind(self, runner, tmp_path):
        """Test an unknown kind is a usage error."""
        result = invoke(runner, tmp_path, "pending", "--kind", "bribe")
        assert result.exit_code == 2


class TestResolve:
    """Test the resolve command."""

    def test_resolve_persists(self, runner, tmp_path):
        """Test a resolution is saved to the snapshot."""
        request_id = create_test_request(tmp_path)
        result = invoke(runner, tmp_path, "resolve", "partnership", request_id, "approved",
                        "--feedback", "Welcome")
        assert result.exit_code == 0, result.output

        state = SnapshotStore(FileBackend(tmp_path)).load_snapshot()
        request = state.get_request(RequestKind.PARTNERSHIP, request_id)
        assert request.status == CouncilStatus.APPROVED
        assert request.feedback == "Welcome"

    def test_resolve_unknown_id(self, runner, tmp_path):
        """Test resolving a missing request fails."""
        result = invoke(runner, tmp_path, "resolve", "verification", "req-missing", "approved")
        assert result.exit_code == 1
        assert "req-missing" in result.output

    def test_pending_is_not_a_resolution(self, runner, tmp_path):
        """Test 'pending' is rejected as a resolution status."""
        result = invoke(runner, tmp_path, "resolve", "verification", "req-1", "pending")
        assert result.exit_code == 2


class TestEligibility:
    """Test the eligibility command."""

    def test_report(self, runner, tmp_path):
        """Test the report is printed as JSON."""
        result = invoke(runner, tmp_path, "eligibility", "Wayfarer")
        assert result.exit_code == 0
        report = json.loads(result.output[result.output.index("{"):])
        assert report["targetTier"] == "Wayfarer"
        assert report["currentTier"] == "Seeker"
        assert report["looksReady"] is False

    def test_unknown_tier(self, runner, tmp_path):
        """Test an unknown tier is a usage error."""
        assert invoke(runner, tmp_path, "eligibility", "Emperor").exit_code == 2


class TestDraft:
    """Test the draft command."""

    def test_draft_without_api_key(self, runner, tmp_path):
        """Test drafting without a key prints a placeholder draft."""
        result = invoke(runner, tmp_path, "draft", "Beekeeping", "Keep a hive")
        assert result.exit_code == 0
        assert "could not draft" in result.output
        assert '"requirements": []' in result.output
        assert '"difficulty": 3' in result.output
