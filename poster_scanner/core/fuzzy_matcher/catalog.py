import duckdb
import json

from pathlib import Path

from poster_scanner.core.fuzzy_matcher.matcher import CandidateRecord
from poster_scanner.core.module_logger         import ModuleLogger

logger = ModuleLogger('catalog')()

class MovieCatalog:
    """
    Local movie database backed by a DuckDB file. Serves candidate records
    for a guessed title the way a remote movie search endpoint would.
    """
    TABLE_NAME = 'movies'
    COLUMNS    = CandidateRecord._fields

    def __init__(self, db_path: Path):
        """
        Initializes the MovieCatalog instance.

        Args:
            db_path : Path to the DuckDB database holding a 'movies' table

        Raises:
            FileNotFoundError: If the database file does not exist
        """
        self.db_path = Path(db_path)
        if not self.db_path.is_file():
            raise FileNotFoundError(f"Movie database not found: {self.db_path}")

    @classmethod
    def from_jsonl(cls, jsonl_path: Path, db_path: Path) -> 'MovieCatalog':
        """
        Builds (or replaces) the movies table from a JSON Lines dump of search results.

        Args:
            jsonl_path : File with one search result object per line
            db_path    : Path where the DuckDB database is created

        Returns:
            MovieCatalog over the new database.
        """
        with Path(jsonl_path).open('r', encoding = 'utf-8') as f:
            records = [CandidateRecord.from_dict(json.loads(line)) for line in f if line.strip()]

        with duckdb.connect(str(db_path)) as conn:
            conn.execute(f"""
                CREATE OR REPLACE TABLE {cls.TABLE_NAME} (
                    title          VARCHAR NOT NULL,
                    original_title VARCHAR,
                    popularity     DOUBLE,
                    vote_count     BIGINT,
                    id             BIGINT,
                    release_date   VARCHAR
                )
            """)
            if records:
                conn.executemany(
                    f"INSERT INTO {cls.TABLE_NAME} VALUES (?, ?, ?, ?, ?, ?)",
                    [tuple(record) for record in records]
                )

        logger.info(f"Stored {len(records)} movies from {jsonl_path} in {db_path}")
        return cls(db_path)

    def load_records(self) -> list[CandidateRecord]:
        """
        Loads every movie record in table order.
        """
        with duckdb.connect(str(self.db_path), read_only = True) as conn:
            rows = conn.execute(
                f"SELECT {', '.join(self.COLUMNS)} FROM {self.TABLE_NAME} ORDER BY rowid"
            ).fetchall()

        return [CandidateRecord.from_dict(dict(zip(self.COLUMNS, row))) for row in rows]

    def search(self, query: str, limit: int = 20) -> list[CandidateRecord]:
        """
        Returns the movies whose title or original title is closest to the query.

        Args:
            query : Guessed title
            limit : Maximum number of records to return

        Returns:
            list: Candidate records, closest first
        """
        query = query.lower()
        with duckdb.connect(str(self.db_path), read_only = True) as conn:
            rows = conn.execute(
                f"""
                SELECT {', '.join(self.COLUMNS)}
                FROM {self.TABLE_NAME}
                ORDER BY greatest(
                    jaro_winkler_similarity(lower(title), ?),
                    jaro_winkler_similarity(lower(coalesce(original_title, '')), ?)
                ) DESC, rowid
                LIMIT {int(limit)}
                """,
                [query, query]
            ).fetchall()

        logger.info(f"Catalog search for '{query}' returned {len(rows)} records")
        return [CandidateRecord.from_dict(dict(zip(self.COLUMNS, row))) for row in rows]
