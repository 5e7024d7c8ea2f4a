"""
ETL Pipeline Example: Processing Season Statistics

This example demonstrates an Extract, Transform, Load workflow:
1. Extract: Read raw rows into a Polars DataFrame
2. Transform: Validate rows against a schema, dropping invalid ones
3. Load: Hand plain records to the next stage

Invalid rows are reported through loguru and skipped, so one bad row does not
stop the whole batch.
"""

import polars as pl
from loguru import logger

from vetted import Config, Prop, Schema, snake_to_camel


class SeasonStatsSchema(Schema):
    """Schema for season-level player statistics."""

    player_id = Prop(1, min=1, description="Unique player identifier")
    season = Prop("2023-24", regex=r"^\d{4}-\d{2}$")
    team = Prop("LAL", min=2, max=3)
    games_played = Prop(0, min=0, max=82)
    points_per_game = Prop(0.0, min=0.0, max=50.0)
    field_goal_percentage = Prop(0.0, min=0.0, max=1.0)


def extract_data() -> pl.DataFrame:
    """Extract: in production this would be ``pl.read_csv(path)``."""
    logger.info("[EXTRACT] Reading raw data...")
    raw = pl.DataFrame(
        {
            "playerId": [1, 2, 3, 4, 5],
            "season": ["2023-24", "2023-24", "2023/24", "2023-24", "2023-24"],
            "team": ["LAL", "GSW", "BOS", "MIA", "PHX"],
            "gamesPlayed": [71, 74, 82, 90, 75],
            "pointsPerGame": [25.2, 26.4, 23.8, 20.1, 27.1],
            "fieldGoalPercentage": [0.540, 0.452, 0.471, 0.463, 0.521],
        }
    )
    logger.info(f"   [OK] Loaded {raw.height} rows")
    return raw


def transform_data(raw: pl.DataFrame) -> list[SeasonStatsSchema]:
    """Transform: validate each row, skipping invalid ones."""
    logger.info("[TRANSFORM] Validating rows...")
    # Source columns are camelCase; schema fields are snake_case
    config = Config(rename=snake_to_camel, skip_invalid=True)
    stats = SeasonStatsSchema.parse_frame(raw, config)
    logger.info(f"   [OK] {len(stats)} of {raw.height} rows passed validation")
    return stats


def load_data(stats: list[SeasonStatsSchema]) -> pl.DataFrame:
    """Load: collect validated records into a clean frame."""
    logger.info("[LOAD] Building output frame...")
    return pl.DataFrame([s.to_dict() for s in stats])


def main() -> None:
    clean = load_data(transform_data(extract_data()))
    print(clean)


if __name__ == "__main__":
    main()
