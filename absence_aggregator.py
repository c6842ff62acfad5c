from models import COUNT_FIELDS, AbsenceRecord, AggregateResult, MonthlySummary, TagType

DEFAULT_ABSENT_LABEL = 'Absent'


def extract_absences(payload, window):
    """Absent days of one month that fall inside the window, one record per date."""
    absences = []
    seen = set()
    for day in payload.days:
        if not window.contains(day.day) or day.day in seen:
            continue
        for status in day.statuses:
            if status.tag_type == TagType.ABSENT:
                absences.append(AbsenceRecord(day.day.isoformat(), status.tag_name or DEFAULT_ABSENT_LABEL))
                seen.add(day.day)
                break
    return absences


def build_summary(payload) -> MonthlySummary:
    return MonthlySummary(
        month=payload.month,
        year=payload.year,
        **{name: payload.counts.get(name, 0) for name in COUNT_FIELDS},
    )


def aggregate(payloads, window) -> AggregateResult:
    """
    Combines per-month payloads (already in chronological order) into one result.

    `reported_totals` are HRMS's own month-level counts and are not reconciled with
    the day-level absences: months overhang the window at both ends.
    """
    absent_days = []
    seen_dates = set()
    summaries = []
    for payload in payloads:
        for record in extract_absences(payload, window):
            if record.date not in seen_dates:
                seen_dates.add(record.date)
                absent_days.append(record)
        summaries.append(build_summary(payload))

    totals = {name: sum(getattr(s, name) for s in summaries) for name in COUNT_FIELDS}
    return AggregateResult(absent_days=tuple(absent_days), summary=tuple(summaries), reported_totals=totals)
