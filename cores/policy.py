from dataclasses import asdict, dataclass, fields


@dataclass(frozen=True)
class Policy:
    """
    Immutable snapshot of the tunable test policy.

    Every engine call receives one of these explicitly. A session stores the
    policy it was provisioned under, so admin edits never reach a test that
    is already running.
    """
    mcq_count: int = 10
    coding_count: int = 2
    mcq_time_limit: int = 30
    coding_time_limit: int = 45
    passing_percentage: int = 70
    round1_passing_percentage: int = 60
    max_violations: int = 5
    violation_penalty_percent: int = 5
    auto_submit_on_violation: bool = True
    require_fullscreen: bool = True
    max_leave_days: int = 7
    warning_offset: int = 2
    critical_offset: int = 1

    @property
    def total_time_limit(self):
        return self.mcq_time_limit + self.coding_time_limit

    def as_dict(self):
        return asdict(self)

    @classmethod
    def from_dict(cls, data):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (data or {}).items() if k in known})


DEFAULT_POLICY = Policy()
