"""
Tests: MongoDB repository against a mocked pymongo database.
"""

from unittest.mock import MagicMock

import pytest
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from rfp_analyzer.config import Settings
from rfp_analyzer.errors import ConfigurationError, PersistenceError
from rfp_analyzer.models.schemas import Company, PastProject, RequirementCandidate, RfpRecord
from rfp_analyzer.persistence import MongoClient, RfpRepository
from rfp_analyzer.persistence.rfp_repository import (
    CAPABILITIES,
    COMPANIES,
    COMPLIANCE_CHECKS,
    PAST_PROJECTS,
    REQUIREMENTS,
    RFPS,
    from_document,
    to_document,
)


@pytest.fixture
def collections():
    return {}


@pytest.fixture
def repo(collections):
    db = MagicMock()
    db.__getitem__.side_effect = lambda name: collections.setdefault(name, MagicMock())
    return RfpRepository(database=db)


def test_document_round_trip_uses_id_key():
    record = RfpRecord(title="Bridge maintenance", budget_max=1000.0)
    doc = to_document(record)
    assert doc["_id"] == record.id
    assert "id" not in doc
    assert from_document(RfpRecord, doc) == record
    assert from_document(RfpRecord, None) is None


def test_create_rfp(repo, collections):
    record = repo.create_rfp(RfpRecord(title="Bridge maintenance"))
    inserted = collections[RFPS].insert_one.call_args.args[0]
    assert inserted["_id"] == record.id
    assert inserted["status"] == "pending"


def test_get_rfp(repo, collections):
    record = RfpRecord(title="Bridge maintenance", client_name="County of Shelby")
    repo._db[RFPS].find_one.return_value = to_document(record)

    loaded = repo.get_rfp(record.id)

    assert loaded.client_name == "County of Shelby"
    collections[RFPS].find_one.assert_called_once_with({"_id": record.id})


def test_update_rfp_upserts_with_timestamp(repo, collections):
    repo.update_rfp("rfp-1", {"status": "active", "title": "Bridge"})

    query, update = collections[RFPS].update_one.call_args.args
    assert query == {"_id": "rfp-1"}
    assert update["$set"]["status"] == "active"
    assert "updated_at" in update["$set"]
    assert collections[RFPS].update_one.call_args.kwargs == {"upsert": True}


def test_insert_requirements(repo, collections):
    count = repo.insert_requirements("rfp-1", [
        RequirementCandidate(text="Vendor must be insured", is_mandatory=True),
        RequirementCandidate(text="Weekly status reports"),
    ])

    assert count == 2
    rows = collections[REQUIREMENTS].insert_many.call_args.args[0]
    assert [r["rfp_id"] for r in rows] == ["rfp-1", "rfp-1"]
    assert rows[0]["requirement_text"] == "Vendor must be insured"
    assert rows[0]["category"] == "Technical"


def test_insert_no_requirements_skips_write(repo, collections):
    assert repo.insert_requirements("rfp-1", []) == 0
    assert REQUIREMENTS not in collections


def test_recent_past_projects_sorted_and_limited(repo, collections):
    project = PastProject(company_id="c1", project_name="Roads", completion_date="2024-05-01")
    cursor = MagicMock()
    cursor.sort.return_value.limit.return_value = [to_document(project)]
    repo._db[PAST_PROJECTS].find.return_value = cursor

    projects = repo.list_recent_past_projects("c1")

    assert projects == [project]
    collections[PAST_PROJECTS].find.assert_called_once_with({"company_id": "c1"})
    cursor.sort.assert_called_once_with("completion_date", DESCENDING)
    cursor.sort.return_value.limit.assert_called_once_with(5)


def test_driver_errors_become_persistence_errors(repo):
    repo._db[RFPS].update_one.side_effect = PyMongoError("connection reset")
    with pytest.raises(PersistenceError, match="Failed to update rfp: connection reset"):
        repo.update_rfp("rfp-1", {"status": "active"})


def test_missing_uri_is_configuration_error(monkeypatch):
    monkeypatch.setattr(
        "rfp_analyzer.persistence.mongo_client.get_settings",
        lambda: Settings(mongodb_uri=""),
    )
    with pytest.raises(ConfigurationError, match="MONGODB_URI"):
        MongoClient().connect()
    with pytest.raises(ConfigurationError):
        RfpRepository()


def test_list_rfps_newest_first_with_counts(repo, collections):
    record = RfpRecord(title="Bridge maintenance")
    cursor = MagicMock()
    cursor.sort.return_value = [to_document(record)]
    repo._db[RFPS].find.return_value = cursor
    repo._db[REQUIREMENTS].count_documents.return_value = 4
    repo._db[COMPLIANCE_CHECKS].count_documents.return_value = 2

    listings = repo.list_rfps()

    cursor.sort.assert_called_once_with("created_at", DESCENDING)
    assert listings[0].rfp == record
    assert listings[0].requirements_count == 4
    assert listings[0].compliance_checks_count == 2
    collections[REQUIREMENTS].count_documents.assert_called_once_with({"rfp_id": record.id})


def test_update_company_returns_updated_profile(repo, collections):
    company = Company(name="Acme Digital", industry="Government IT")
    repo._db[COMPANIES].find_one_and_update.return_value = to_document(company)

    updated = repo.update_company(company.id, {"industry": "Government IT"})

    assert updated == company
    query, update = collections[COMPANIES].find_one_and_update.call_args.args
    assert query == {"_id": company.id}
    assert update == {"$set": {"industry": "Government IT"}}
    assert collections[COMPANIES].find_one_and_update.call_args.kwargs == {
        "return_document": ReturnDocument.AFTER,
    }


def test_update_unknown_company(repo):
    repo._db[COMPANIES].find_one_and_update.return_value = None
    assert repo.update_company("missing", {"industry": "Energy"}) is None


def test_delete_capability_scoped_to_company(repo, collections):
    repo._db[CAPABILITIES].delete_one.return_value.deleted_count = 1

    assert repo.delete_capability("c1", "cap-1") is True
    collections[CAPABILITIES].delete_one.assert_called_once_with({"_id": "cap-1", "company_id": "c1"})

    repo._db[CAPABILITIES].delete_one.return_value.deleted_count = 0
    assert repo.delete_capability("c2", "cap-1") is False
