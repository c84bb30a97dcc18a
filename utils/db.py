"""Shared map data and the in-memory DuckDB parcel index, cached with Streamlit."""

import logging

import duckdb
import pandas as pd
import streamlit as st
from rapidfuzz import fuzz, process
from rapidfuzz import utils as fuzz_utils

from utils.data_loader import DataUnavailableError, LoadedSources, SourceConfig, load_all_sources
from utils.map_layers import ParcelMapModel
from utils.records import FeatureRecordStore

logger = logging.getLogger(__name__)

INDEX_TABLE = "parcel_index"
NO_RESULTS = "No parcels found - try a different search"


@st.cache_resource
def get_duckdb_connection():
    """
    Get or create a shared DuckDB connection (app-wide singleton).

    This connection is shared across all user sessions and persists
    for the lifetime of the Streamlit app.

    Returns:
        duckdb.DuckDBPyConnection: Shared in-memory DuckDB connection
    """
    return duckdb.connect()


def build_parcel_index(conn, views: pd.DataFrame) -> int:
    """
    Load resolved parcel views into the parcel_index table.

    Parcels without an account identifier cannot be looked up and are left
    out; duplicate accounts keep their first row.

    Args:
        conn: DuckDB connection
        views: DataFrame from ParcelMapModel.views_dataframe()

    Returns:
        Number of indexed parcels
    """
    df = views[views["account_id"].notna()].drop_duplicates(subset="account_id").copy()

    if df.empty:
        conn.execute(f"""
            CREATE OR REPLACE TABLE {INDEX_TABLE} (
                label VARCHAR, account_id VARCHAR, situs VARCHAR, subdivision VARCHAR, source VARCHAR
            )
        """)
        logger.info("Indexed 0 parcels for search")
        return 0

    for column in ("account_id", "situs", "subdivision"):
        df[column] = df[column].astype(str)
    df["label"] = df["situs"] + " (" + df["account_id"] + ")"
    df = df[["label", "account_id", "situs", "subdivision", "source"]]

    conn.register("parcel_index_df", df)
    try:
        conn.execute(f"CREATE OR REPLACE TABLE {INDEX_TABLE} AS SELECT * FROM parcel_index_df")
    finally:
        conn.unregister("parcel_index_df")

    logger.info("Indexed %d parcels for search", len(df))
    return len(df)


def search_parcels(conn, searchterm: str) -> list[tuple[str, str]]:
    """
    Search the parcel index by situs, account or subdivision.

    Substring matches come first (prefix matches ranked ahead); when they are
    sparse, fuzzy matches are merged in.

    Args:
        conn: DuckDB connection holding parcel_index
        searchterm: User's search input

    Returns:
        List of (display_label, account_id) tuples
    """
    # Minimum 2 characters to search
    if not searchterm or len(searchterm.strip()) < 2:
        return []

    term = searchterm.strip()
    # Wildcards typed by the user match literally
    literal = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    contains = f"%{literal}%"
    prefix = f"{literal}%"

    # Phase 1: substring search
    exact_results = conn.execute(
        f"""
        SELECT label, account_id
        FROM {INDEX_TABLE}
        WHERE situs ILIKE ? ESCAPE '\\'
            OR account_id ILIKE ? ESCAPE '\\'
            OR subdivision ILIKE ? ESCAPE '\\'
        ORDER BY
            CASE WHEN situs ILIKE ? ESCAPE '\\' OR account_id ILIKE ? ESCAPE '\\' THEN 1 ELSE 2 END,
            label
        LIMIT 100
        """,
        [contains, contains, contains, prefix, prefix],
    ).fetchall()

    # Phase 2: fuzzy search if exact results are sparse
    if len(exact_results) < 10:
        all_parcels = conn.execute(f"SELECT label, account_id FROM {INDEX_TABLE}").fetchall()
        labels = [label for label, _ in all_parcels]

        fuzzy_matches = process.extract(
            term,
            labels,
            scorer=fuzz.token_set_ratio,
            processor=fuzz_utils.default_process,
            limit=20,
            score_cutoff=70,
        )

        # Merge results, avoiding duplicates
        seen_accounts = {account for _, account in exact_results}
        for _, _, index in fuzzy_matches:
            label, account = all_parcels[index]
            if account not in seen_accounts:
                exact_results.append((label, account))
                seen_accounts.add(account)

    if not exact_results:
        return [(NO_RESULTS, None)]

    return [(label, account) for label, account in exact_results[:100]]


def _secret_overrides() -> dict:
    """The [data] table of Streamlit secrets, or nothing when no secrets file exists."""
    try:
        return dict(st.secrets.get("data", {}))
    except FileNotFoundError:
        return {}


@st.cache_resource(ttl=3600, show_spinner="Loading parcel data...")  # Reload hourly, shared across sessions
def load_map_data(config: SourceConfig) -> tuple[LoadedSources, FeatureRecordStore]:
    """
    Load all sources and build the record store (app-wide, once per config).

    A total failure raises instead of returning, so it is never cached and
    the next page load retries.

    Raises:
        DataUnavailableError: if every source failed to load
    """
    sources = load_all_sources(config)
    if sources.all_failed:
        raise DataUnavailableError("None of the map data sources could be read.")

    store = FeatureRecordStore.from_sources(sources.property_report, sources.addresses)
    logger.info("Loaded %r", store)
    return sources, store


@st.cache_resource(ttl=3600)
def get_parcel_index(_conn, _sources: LoadedSources, _store: FeatureRecordStore) -> int:
    """Build the search index once per app; resolution does not depend on the color mode."""
    views = ParcelMapModel(_sources.parcels, _store).views_dataframe()
    return build_parcel_index(_conn, views)


def get_connection():
    """
    Get connection and loaded map data.

    Returns:
        tuple: (conn, sources, store)
    """
    config = SourceConfig.from_mapping(_secret_overrides())
    sources, store = load_map_data(config)
    conn = get_duckdb_connection()
    get_parcel_index(conn, sources, store)

    return conn, sources, store
