"""
Pytest configuration and shared fixtures for service layer tests.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from app.services.platform.gateway import CallResult
from app.services.referrals.graph import ReferralGraph
from app.services.referrals.store import ReferralStore
from app.services.tiers.service import TierPolicy
from app.services.tracker.service import ReferralTracker


@pytest.fixture
def store_path(tmp_path):
    """Path of the persisted referral document"""
    return str(tmp_path / "invites.json")


@pytest.fixture
def store(store_path):
    """Empty referral store backed by a temp file"""
    return ReferralStore(store_path)


@pytest.fixture
def graph(store):
    """Empty referral forest"""
    return ReferralGraph(store)


@pytest.fixture
def policy():
    """Default tier table: 1, 5, 10, 30, 50, 75, 100"""
    return TierPolicy.from_table()


@pytest.fixture
def mock_gateway():
    """Mock platform gateway where every call succeeds"""
    gateway = MagicMock()
    gateway.fetch_invites = AsyncMock(return_value=CallResult.success({}))
    gateway.fetch_member_roles = AsyncMock(return_value=CallResult.success([]))
    gateway.role_exists = AsyncMock(return_value=CallResult.success(True))
    gateway.create_role = AsyncMock(return_value=CallResult.success(None))
    gateway.add_role = AsyncMock(return_value=CallResult.success(None))
    gateway.remove_role = AsyncMock(return_value=CallResult.success(None))
    gateway.send_announcement = AsyncMock(return_value=CallResult.success(None))
    return gateway


@pytest.fixture
def tracker(graph, mock_gateway, policy):
    """Tracker over an empty forest and the mock gateway"""
    return ReferralTracker(graph, mock_gateway, policy)
