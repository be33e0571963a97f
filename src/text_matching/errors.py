from .models import Match


class MatchOverlapError(ValueError):
    """A proposed match shares positions with an accepted one."""

    def __init__(self, proposed: Match, existing: Match) -> None:
        self.proposed = proposed
        self.existing = existing
        super().__init__(
            "Overlap detected: "
            f"({proposed.start_a},{proposed.start_b},{proposed.length}) conflicts"
            f" with ({existing.start_a},{existing.start_b},{existing.length})"
        )


class MatchBoundsError(ValueError):
    def __init__(self, match: Match, length_a: int, length_b: int) -> None:
        self.match = match
        self.length_a = length_a
        self.length_b = length_b
        super().__init__(
            f"Match ({match.start_a},{match.start_b},{match.length}) exceeds"
            f" sequence lengths {length_a} / {length_b}"
        )
