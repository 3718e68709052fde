from datetime import date, datetime, timezone

from gymxp.services.ledger import ProgressEntry, ProgressLedger
from gymxp.services.streaks import compute_streaks, monthly_heatmap

TS = datetime(2026, 10, 18, tzinfo=timezone.utc)


def _ledger(*days, completed=True):
    led = ProgressLedger()
    for d in days:
        led.put("Running", d, ProgressEntry(value=5, completed=completed, timestamp=TS, unit="km"))
    return led


def test_sin_actividad():
    assert compute_streaks(ProgressLedger(), date(2026, 10, 18)) == (0, 0)


def test_racha_hasta_hoy():
    led = _ledger("2026-10-16", "2026-10-17", "2026-10-18")
    assert compute_streaks(led, date(2026, 10, 18)) == (3, 3)


def test_racha_sigue_viva_si_el_ultimo_dia_fue_ayer():
    led = _ledger("2026-10-16", "2026-10-17")
    assert compute_streaks(led, date(2026, 10, 18)) == (2, 2)


def test_racha_rota():
    # mejor racha antigua de 4, la actual se cortó hace días
    led = _ledger("2026-10-01", "2026-10-02", "2026-10-03", "2026-10-04", "2026-10-10", "2026-10-11")
    assert compute_streaks(led, date(2026, 10, 18)) == (0, 4)


def test_entradas_vacias_no_cuentan():
    led = ProgressLedger()
    led.put("Push-ups", "2026-10-17", ProgressEntry(value=0, completed=False, timestamp=TS, unit="reps"))
    led.put("Push-ups", "2026-10-18", ProgressEntry(value=0, completed=False, timestamp=TS, unit="reps"))
    assert compute_streaks(led, date(2026, 10, 18)) == (0, 0)


def test_incompletos_con_valor_si_cuentan():
    led = _ledger("2026-10-17", "2026-10-18", completed=False)
    assert compute_streaks(led, date(2026, 10, 18)) == (2, 2)


def test_heatmap_mensual():
    led = _ledger("2026-09-30", "2026-10-01", "2026-10-18")
    led.put("Yoga", "2026-10-18", ProgressEntry(value=20, completed=True, timestamp=TS, unit="minutes"))
    assert monthly_heatmap(led, 2026, 10) == {"2026-10-01": 1, "2026-10-18": 2}
    assert monthly_heatmap(led, 2026, 11) == {}
