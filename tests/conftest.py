"""Pytest configuration and fixtures for all tests."""

import fnmatch
import os
from datetime import date
from unittest.mock import patch

import pytest

# Set test environment variables before any imports
os.environ["STORE_BACKEND"] = "memory"
os.environ["AUTO_BACKUP"] = "false"
os.environ["DEBUG"] = "false"
os.environ["LOG_LEVEL"] = ""


# Mock Redis before importing the stores
class MockRedis:
    """Mock Redis client for testing."""

    def __init__(self, *args, **kwargs):
        self.data = {}

    def ping(self):
        return True

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, **kwargs):
        self.data[key] = value
        return True

    def delete(self, key):
        if key in self.data:
            del self.data[key]
            return 1
        return 0

    def keys(self, pattern="*"):
        return [k for k in self.data if fnmatch.fnmatchcase(k, pattern)]


# Patch Redis globally for all tests; every client gets a fresh keyspace
redis_patch = patch("redis.from_url", side_effect=lambda *args, **kwargs: MockRedis())
redis_patch.start()


@pytest.fixture
def today():
    """Fixed reference date for eligibility calculations."""
    return date(2024, 6, 1)


@pytest.fixture
def memory_store():
    from vetblood.storage.kv_store import MemoryStore

    return MemoryStore()


@pytest.fixture
def donor_store(memory_store):
    from vetblood.storage.donor_store import DonorStore

    return DonorStore(memory_store)


@pytest.fixture
def backup_storage():
    from vetblood.storage.backup import MemoryBackupStorage

    return MemoryBackupStorage()


@pytest.fixture
def donor_service(donor_store, backup_storage):
    from vetblood.services.donor_service import DonorService

    return DonorService(donor_store, backup_storage=backup_storage, auto_backup=True)


@pytest.fixture
def dog_form():
    """A complete, valid donor form for a dog."""
    return {
        "date": "2024-03-01",
        "location": "רחובות",
        "animalName": "Rex",
        "ownerName": "Dana",
        "ownerPhone": "050-1234567",
        "age": "4",
        "weight": "32.5",
        "gender": "Male",
        "animalType": "Dog",
        "bloodType": "DEA 1.1 Negative",
        "fiv": "",
        "felv": "",
        "pcv": "45",
        "hct": "",
        "wbc": "",
        "plt": "",
        "packedCell": "",
        "slideFindings": "",
        "donated": "Yes",
        "volume": "450",
        "notes": "",
        "isPrivateOwner": False,
    }


@pytest.fixture
def sample_donors():
    """Stored donors across two locations and both species."""
    return [
        {
            "id": "rex_dana",
            "date": "2024-01-15",
            "location": "רחובות",
            "animalName": "Rex",
            "ownerName": "Dana",
            "animalType": "Dog",
            "donated": "Yes",
        },
        {
            "id": "mitzi_avi",
            "date": "20/01/2024",
            "location": "חולון",
            "animalName": "Mitzi",
            "ownerName": "Avi",
            "animalType": "Cat",
            "donated": "כן",
        },
        {
            "id": "bolt_noa",
            "date": "2024-02-10",
            "location": "רחובות",
            "animalName": "Bolt",
            "ownerName": "Noa",
            "animalType": "Dog",
            "donated": "No",
        },
    ]
