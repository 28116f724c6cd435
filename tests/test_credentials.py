"""
Tests for credential persistence.

Feature: credentials
"""

import json
import tempfile
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from azdo_panel.credentials import (
    ACCESS_TOKEN_KEY,
    ORGANIZATION_URL_KEY,
    CredentialStore,
    JsonFileStore,
    MemoryStore,
)
from azdo_panel.types import Credentials

field_strategy = st.text(min_size=1, max_size=60).filter(lambda s: s.strip())
credentials_strategy = st.builds(
    Credentials, organization_url=field_strategy, access_token=field_strategy
)


@given(credentials=credentials_strategy)
@settings(max_examples=100)
def test_save_then_load_round_trips(credentials: Credentials) -> None:
    store = CredentialStore(MemoryStore())

    store.save(credentials)

    assert store.load() == credentials


@given(credentials=credentials_strategy)
@settings(max_examples=25)
def test_save_then_load_round_trips_through_file(credentials: Credentials) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "nested" / "credentials.json"
        CredentialStore(JsonFileStore(path)).save(credentials)

        # A fresh store instance, as after a restart.
        assert CredentialStore(JsonFileStore(path)).load() == credentials


def test_clear_then_load_is_absent(credential_store: CredentialStore, sample_credentials: Credentials) -> None:
    credential_store.save(sample_credentials)

    credential_store.clear()

    assert credential_store.load() is None


def test_partial_state_is_absent() -> None:
    store = CredentialStore(MemoryStore({ORGANIZATION_URL_KEY: "https://dev.azure.com/acme"}))
    assert store.load() is None

    store = CredentialStore(
        MemoryStore({ORGANIZATION_URL_KEY: "https://dev.azure.com/acme", ACCESS_TOKEN_KEY: ""})
    )
    assert store.load() is None


def test_clear_removes_both_keys(memory_store: MemoryStore, sample_credentials: Credentials) -> None:
    store = CredentialStore(memory_store)
    store.save(sample_credentials)
    memory_store.set("unrelated", "kept")

    store.clear()

    assert memory_store.data == {"unrelated": "kept"}


def test_file_store_keeps_other_keys(tmp_path: Path, sample_credentials: Credentials) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({"theme": "dark"}))

    CredentialStore(JsonFileStore(path)).save(sample_credentials)

    data = json.loads(path.read_text())
    assert data["theme"] == "dark"
    assert data[ORGANIZATION_URL_KEY] == sample_credentials.organization_url
    assert data[ACCESS_TOKEN_KEY] == sample_credentials.access_token


def test_corrupt_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("{not json")

    assert CredentialStore(JsonFileStore(path)).load() is None


def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    store = CredentialStore(JsonFileStore(tmp_path / "missing.json"))

    assert store.load() is None
    store.clear()
    assert not (tmp_path / "missing.json").exists()


def test_credentials_repr_hides_token(sample_credentials: Credentials) -> None:
    assert sample_credentials.access_token not in repr(sample_credentials)


def test_credentials_validity() -> None:
    assert Credentials("https://dev.azure.com/acme", "pat").is_valid
    assert not Credentials("https://dev.azure.com/acme", "   ").is_valid
    assert not Credentials("", "pat").is_valid
