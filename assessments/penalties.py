WARNING_NORMAL = 'normal'
WARNING_WARNING = 'warning'
WARNING_CRITICAL = 'critical'


def penalty_for(count, policy):
    """Percentage points deducted for ``count`` violations, capped at 100."""
    return min(100, count * policy.violation_penalty_percent)


def warning_level(count, policy):
    """
    Escalation tier for the client's proctoring banner. With the default
    offsets and a limit of 5: 1-2 normal, 3 warning, 4 and up critical.
    """
    critical_at = policy.max_violations - policy.critical_offset
    warning_at = policy.max_violations - policy.warning_offset
    if count >= critical_at:
        return WARNING_CRITICAL
    if count >= warning_at:
        return WARNING_WARNING
    return WARNING_NORMAL
