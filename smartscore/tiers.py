# smartscore/tiers.py
# Score -> tier label. Two threshold schemes exist across data versions;
# which one applies is configuration (SMARTSCORE_TIER_SCHEME).

from dataclasses import dataclass

from smartscore.normalize import to_num


@dataclass(frozen=True)
class TierPolicy:
    name: str
    bands: tuple          # ((threshold, label), ...) highest threshold first
    floor: str            # label below the lowest threshold

    def classify(self, score):
        """Tier label for a score, or None when the score has no value."""
        s = to_num(score)
        if s is None:
            return None
        for threshold, label in self.bands:
            if s >= threshold:
                return label
        return self.floor

    @property
    def labels(self) -> list[str]:
        return [label for _, label in self.bands] + [self.floor]


SCHEME_A = TierPolicy(
    name="A",
    bands=((90, "Leadership"), (80, "Positive"), (70, "Neutral"), (60, "Caution")),
    floor="Avoid",
)

SCHEME_B = TierPolicy(
    name="B",
    bands=((75, "Positive"), (40, "Neutral")),
    floor="Negative",
)

POLICIES = {p.name: p for p in (SCHEME_A, SCHEME_B)}


def get_policy(name: str | None = None) -> TierPolicy:
    if name is None:
        from smartscore import settings
        name = settings.TIER_SCHEME
    try:
        return POLICIES[str(name).strip().upper()]
    except KeyError:
        raise ValueError(f"unknown tier scheme: {name!r} (expected one of {sorted(POLICIES)})") from None


# ---------- Score distribution buckets (dashboard) ----------
BUCKETS = (
    ("90s", "90–100", 90),
    ("80s", "80–89", 80),
    ("70s", "70–79", 70),
    ("60s", "60–69", 60),
)
BUCKET_BELOW = ("below_60", "< 60")


def score_bucket(score):
    s = to_num(score)
    if s is None:
        return None
    for key, _, lo in BUCKETS:
        if s >= lo:
            return key
    return BUCKET_BELOW[0]


def bucket_labels() -> list[tuple[str, str]]:
    return [(k, label) for k, label, _ in BUCKETS] + [BUCKET_BELOW]
