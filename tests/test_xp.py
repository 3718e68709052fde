import random
from datetime import date, datetime, timezone

import pytest

from gymxp.services.ledger import ProgressEntry, ProgressLedger
from gymxp.services.xp import (
    DAILY_XP_CAP,
    DEFAULT_RATE,
    AggregateXP,
    earned_xp,
    month_bounds,
    rate_per_unit,
    recompute_all,
    week_bounds,
    window_xp,
    xp_views,
)

TS = datetime(2026, 10, 18, tzinfo=timezone.utc)


def _e(value, completed=True, unit="reps", additional=False):
    return ProgressEntry(value=value, completed=completed, timestamp=TS, unit=unit, is_additional=additional)


def test_push_ups_clampados_dan_3_xp():
    led = ProgressLedger()
    led.record_progress("Push-ups", "2026-10-18", 50, "reps", False, target_value=30, now=TS)
    agg = recompute_all(led)
    assert rate_per_unit("Push-ups", "reps") == 0.1
    assert agg.daily_xp == {"2026-10-18": 3}
    assert agg.total_xp == 3


def test_tope_diario_100():
    # Running 6 km * 10 = 60 XP, Swimming 50 min * 1 = 50 XP -> 110 capado a 100
    led = ProgressLedger([
        ("Running", "2026-10-18", _e(6, unit="km")),
        ("Swimming", "2026-10-18", _e(50, unit="minutes")),
    ])
    agg = recompute_all(led)
    assert agg.daily_xp["2026-10-18"] == DAILY_XP_CAP
    assert agg.total_xp == 100


def test_solo_cuenta_completed_true_estricto():
    class Loose(ProgressEntry):
        pass

    led = ProgressLedger([
        ("Running", "2026-10-18", _e(3, completed=False, unit="km")),
        ("Cycling", "2026-10-18", Loose(value=10, completed=1, timestamp=TS, unit="km")),
        ("Walking", "2026-10-18", _e(2, unit="km")),
    ])
    agg = recompute_all(led)
    # Solo Walking: 2 km * 6 = 12
    assert agg.daily_xp == {"2026-10-18": 12}


def test_tasa_por_defecto():
    assert rate_per_unit("Rope Climbing", "reps") == DEFAULT_RATE
    assert rate_per_unit("Running", "reps") == DEFAULT_RATE
    # 25 * 0.1 = 2.5 -> 2
    led = ProgressLedger([("Rope Climbing", "2026-10-18", _e(25, additional=True))])
    assert recompute_all(led).total_xp == 2


def test_floor_sin_perder_puntos_por_coma_flotante():
    assert earned_xp(0.29, 100) == 29
    assert earned_xp(30, 0.1) == 3
    assert earned_xp(7, 0.15) == 1


def test_idempotente():
    led = ProgressLedger([
        ("Running", "2026-10-17", _e(3, unit="km")),
        ("Push-ups", "2026-10-18", _e(30)),
    ])
    a = recompute_all(led)
    b = recompute_all(led)
    assert a == b
    assert a.same_as(b.total_xp, b.daily_xp)


def test_same_as_detecta_cambios():
    agg = AggregateXP(total_xp=10, daily_xp={"2026-10-18": 10})
    assert agg.same_as(10, {"2026-10-18": 10})
    assert not agg.same_as(10, {"2026-10-17": 10})
    assert not agg.same_as(0, {})


def _random_ledger(rng):
    names = [("Running", "km"), ("Push-ups", "reps"), ("Yoga", "minutes"), ("Burpees", "reps"), ("Rope", "reps")]
    led = ProgressLedger()
    for _ in range(rng.randint(0, 40)):
        name, unit = rng.choice(names)
        day = f"2026-10-{rng.randint(1, 28):02d}"
        led.put(name, day, _e(rng.uniform(0, 500), completed=rng.random() < 0.7, unit=unit))
    return led


@pytest.mark.parametrize("seed", range(25))
def test_propiedades_tope_y_suma(seed):
    agg = recompute_all(_random_ledger(random.Random(seed)))
    assert all(0 <= v <= DAILY_XP_CAP for v in agg.daily_xp.values())
    assert agg.total_xp == sum(agg.daily_xp.values())


@pytest.mark.parametrize("seed", range(10))
def test_borrar_un_completado_nunca_sube_el_total(seed):
    rng = random.Random(seed)
    led = _random_ledger(rng)
    before = recompute_all(led).total_xp
    done = [(n, d) for n, d, e in led.entries() if e.completed is True]
    if not done:
        return
    led.remove_record(*rng.choice(done))
    assert recompute_all(led).total_xp <= before


def test_semana_empieza_en_domingo():
    # 2026-10-18 es domingo
    assert week_bounds(date(2026, 10, 18)) == (date(2026, 10, 18), date(2026, 10, 24))
    # miércoles 2026-10-21 -> misma semana
    assert week_bounds(date(2026, 10, 21)) == (date(2026, 10, 18), date(2026, 10, 24))
    # sábado 2026-10-17 -> semana anterior
    assert week_bounds(date(2026, 10, 17)) == (date(2026, 10, 11), date(2026, 10, 17))


def test_limites_de_mes():
    assert month_bounds(date(2026, 10, 18)) == (date(2026, 10, 1), date(2026, 10, 31))
    assert month_bounds(date(2026, 12, 5)) == (date(2026, 12, 1), date(2026, 12, 31))
    assert month_bounds(date(2028, 2, 10)) == (date(2028, 2, 1), date(2028, 2, 29))


def test_vistas_suman_valores_ya_capados():
    daily = {"2026-09-30": 100, "2026-10-17": 100, "2026-10-18": 100, "2026-10-20": 40}
    views = xp_views(daily, date(2026, 10, 20))
    assert views == {"daily_xp": 40, "weekly_xp": 140, "monthly_xp": 240, "total_xp": 340}
    # la semana no se vuelve a capar
    assert window_xp(daily, date(2026, 10, 1), date(2026, 10, 31)) == 240


@pytest.mark.parametrize("value,rate", [(1e308, 30.0), (1.7e308, 10.0)])
def test_desborde_a_infinito_se_capa(value, rate):
    assert earned_xp(value, rate) == DAILY_XP_CAP


def test_recompute_con_entrada_enorme_no_revienta():
    # entrada fuera de rango que no pasó por build_entry (p. ej. datos antiguos)
    led = ProgressLedger([
        ("Tabata", "2026-10-18", _e(1e308, unit="minutes", additional=True)),
        ("Running", "2026-10-17", _e(2, unit="km")),
    ])
    agg = recompute_all(led)
    assert agg.daily_xp == {"2026-10-17": 20, "2026-10-18": 100}
    assert agg.total_xp == 120
