"""
Basic Usage Example: Player Records

This example demonstrates the core vetted workflow:
1. Declare a schema with sample values and constraints
2. Validate JSON input into typed records
3. Inspect failures without raising
4. Generate a Pydantic model from the same schema
"""

from vetted import CheckError, Prop, Schema


class TeamSchema(Schema):
    """A team, nested inside player records."""

    code = Prop("LAL", min=2, max=3, description="Team abbreviation")
    city = Prop("Los Angeles", min=1)


class PlayerSchema(Schema):
    """Schema for tracking players in a sports league."""

    player_id = Prop(1, min=1, description="Unique player identifier")
    name = Prop("LeBron James", min=1, max=100)
    position = Prop("F", allowed=["PG", "SG", "SF", "PF", "C", "F", "G"], fallback="F")
    age = Prop(18, min=18, max=50)
    points_per_game = Prop(0.0, min=0.0)
    team = Prop(TeamSchema.sample())
    nicknames = Prop(["King James"], required="default")
    is_active = Prop(True, required="default")


def main() -> None:
    """Validate a few player documents."""

    # 1. Parse a JSON document into a record
    player = PlayerSchema.parse(
        """
        {
            "player_id": 23,
            "name": "LeBron James",
            "position": "F",
            "age": 39,
            "points_per_game": 25.2,
            "team": {"code": "LAL", "city": "Los Angeles"}
        }
        """
    )
    print(f"[OK] Parsed player: {player.name} ({player.team.code})")
    print(f"[OK] Defaults filled in: nicknames={player.nicknames}, active={player.is_active}")

    # Unknown positions are replaced by the fallback instead of failing
    guard = PlayerSchema.validate({**player.to_dict(), "position": "Point Guard"})
    print(f"[OK] Position fell back to: {guard.position}")

    # 2. Inspect failures without raising
    r = PlayerSchema.run({**player.to_dict(), "team": {"code": "LOS ANGELES", "city": "LA"}})
    if not r.success:
        print(f"[FAIL] {r.fail.path} ({r.fail.code}): {r.fail.message}")

    try:
        PlayerSchema.validate({"player_id": 2, "name": "Stephen Curry"})
    except CheckError as e:
        print(f"[FAIL] {e}")

    # 3. Generate a Pydantic model for API layers
    Player = PlayerSchema.to_pydantic()
    model = Player(**player.to_dict())
    print(f"[OK] Generated Pydantic model: {Player.__name__} -> {model.name}")


if __name__ == "__main__":
    main()
