from decimal import ROUND_HALF_UP, Decimal

TRACKED_FIELDS = ("weight", "body_fat_percentage", "skeletal_muscle_mass", "bmi")

TWO_PLACES = Decimal("0.01")


def _round(value):
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _snapshot(measurement):
    return {
        "id": measurement.id,
        "measured_at": measurement.measured_at,
        **{field: _round(Decimal(getattr(measurement, field))) for field in TRACKED_FIELDS},
    }


def compare(earlier, later):
    """Absolute and percentage change of each tracked field from `earlier` to `later`."""
    differences = {}
    for field in TRACKED_FIELDS:
        before = Decimal(getattr(earlier, field))
        after = Decimal(getattr(later, field))
        change = after - before
        percentage = change / before * 100 if before else Decimal(0)
        differences[field] = {
            "absolute": _round(change),
            "percentage": _round(percentage),
            "direction": "up" if change > 0 else "down" if change < 0 else "stable",
        }
    return differences


def bioimpedance_report(client, measurements):
    """
    Evolution of a client's body composition.

    `measurements` may come in any order; history is oldest first and the
    trend compares the latest measurement with the one before it.
    """
    history = sorted(measurements, key=lambda m: m.measured_at)
    report = {
        "client": {"id": client.id, "name": client.name},
        "total": len(history),
        "latest": None,
        "averages": {},
        "trend": {},
        "history": [_snapshot(m) for m in history],
    }
    if not history:
        return report

    report["latest"] = _snapshot(history[-1])
    for field in TRACKED_FIELDS:
        values = [Decimal(getattr(m, field)) for m in history]
        report["averages"][field] = _round(sum(values) / len(values))
    if len(history) >= 2:
        report["trend"] = compare(history[-2], history[-1])
    return report
