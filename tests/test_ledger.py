from datetime import date, datetime, timezone

import pytest

from gymxp.errors import ValidationError
from gymxp.services.ledger import MAX_VALUE, ProgressEntry, ProgressLedger, build_entry, coerce_value, parse_date

TS = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)


def _entry(value, completed, additional=False, unit="reps"):
    return ProgressEntry(value=value, completed=completed, timestamp=TS, unit=unit, is_additional=additional)


def test_catalogo_se_clampa_al_objetivo():
    # Push-ups, objetivo 30, se registran 50 -> se guarda 30 y completado
    name, day, e = build_entry("Push-ups", "2026-10-18", 50, "reps", False, target_value=30, now=TS)
    assert (name, day) == ("Push-ups", "2026-10-18")
    assert e.value == 30
    assert e.completed is True
    assert e.is_additional is False


def test_catalogo_por_debajo_del_objetivo_no_completa():
    _, _, e = build_entry("Push-ups", "2026-10-18", 12, "reps", False, target_value=30, now=TS)
    assert e.value == 12
    assert e.completed is False


def test_catalogo_usa_objetivo_por_defecto():
    # Running: objetivo de catálogo 5 km
    _, _, e = build_entry("Running", "2026-10-18", 7.5, "km", False, now=TS)
    assert e.value == 5
    assert e.completed is True


def test_catalogo_sin_objetivo_falla():
    with pytest.raises(ValidationError):
        build_entry("Rope Climbing", "2026-10-18", 3, "reps", False)


def test_adicional_siempre_completado():
    _, _, e = build_entry("Rope Climbing", "2026-10-18", 1, "reps", True, intensity="Light", now=TS)
    assert e.completed is True
    assert e.value == 1
    assert e.intensity == "Light"


@pytest.mark.parametrize("bad", [0, -3, "0", "-1"])
def test_adicional_rechaza_no_positivos(bad):
    with pytest.raises(ValidationError):
        build_entry("Running", "2026-10-18", bad, "km", True)


@pytest.mark.parametrize("bad", ["abc", None, True, float("nan"), float("inf"), [1]])
def test_rechaza_no_numericos(bad):
    with pytest.raises(ValidationError):
        build_entry("Push-ups", "2026-10-18", bad, "reps", False, target_value=30)
    with pytest.raises(ValidationError):
        build_entry("Push-ups", "2026-10-18", bad, "reps", True)


def test_acepta_string_numerico_con_coma():
    assert coerce_value("2,5") == 2.5


@pytest.mark.parametrize("bad_date", ["2026-13-01", "18/10/2026", "", None, "2026-1-1"])
def test_fecha_invalida(bad_date):
    with pytest.raises(ValidationError):
        parse_date(bad_date)


def test_unidad_invalida():
    with pytest.raises(ValidationError):
        build_entry("Running", "2026-10-18", 5, "miles", True)


def test_sobrescribe_ultimo_gana():
    led = ProgressLedger()
    led.record_progress("Running", "2026-10-18", 3, "km", True, now=TS)
    led.record_progress("Running", "2026-10-18", 8, "km", True, now=TS)
    assert len(led) == 1
    assert led.get("Running", "2026-10-18").value == 8


def test_remove_quita_el_workout_vacio():
    led = ProgressLedger([
        ("Running", "2026-10-17", _entry(3, True, True, "km")),
        ("Running", "2026-10-18", _entry(4, True, True, "km")),
    ])
    assert led.remove_record("Running", "2026-10-17") is True
    assert led.workout_names() == ["Running"]
    assert led.remove_record("Running", "2026-10-18") is True
    assert led.workout_names() == []
    assert led.remove_record("Running", "2026-10-18") is False


def test_cleanup_stale_solo_purga_vacios_anteriores_a_ayer():
    as_of = date(2026, 10, 18)
    led = ProgressLedger([
        ("Push-ups", "2026-10-10", _entry(0, False)),        # vacío y viejo -> fuera
        ("Squats", "2026-10-10", _entry(10, False)),         # con valor -> se queda
        ("Planks", "2026-10-10", _entry(0, True, unit="minutes")),  # completado -> se queda
        ("Push-ups", "2026-10-16", _entry(0, False)),        # antes de ayer -> fuera
        ("Push-ups", "2026-10-17", _entry(0, False)),        # ayer -> se queda
        ("Pull-ups", "2026-10-18", _entry(0, False)),        # hoy -> se queda
    ])
    removed = led.cleanup_stale(as_of)
    assert removed == 2
    assert ("Push-ups", "2026-10-10") not in led
    assert ("Push-ups", "2026-10-16") not in led
    assert ("Push-ups", "2026-10-17") in led
    assert ("Squats", "2026-10-10") in led
    assert ("Planks", "2026-10-10") in led
    # idempotente
    assert led.cleanup_stale(as_of) == 0


def test_entries_ordenadas_por_fecha_y_nombre():
    led = ProgressLedger([
        ("Squats", "2026-10-18", _entry(1, False)),
        ("Push-ups", "2026-10-18", _entry(1, False)),
        ("Yoga", "2026-10-01", _entry(10, True, unit="minutes")),
    ])
    keys = [(n, d) for n, d, _ in led.entries()]
    assert keys == [("Yoga", "2026-10-01"), ("Push-ups", "2026-10-18"), ("Squats", "2026-10-18")]


def test_adicional_no_cuenta_como_ya_anadido():
    led = ProgressLedger()
    led.record_progress("Push-ups", "2026-10-18", 1, "reps", True, now=TS)
    assert led.get("Push-ups", "2026-10-18").completed is True
    assert led.has_catalog_entry("Push-ups", "2026-10-18") is False
    assert led.catalog_names_on("2026-10-18") == []

    led.record_progress("Squats", "2026-10-18", 0, "reps", False, target_value=30, now=TS)
    assert led.has_catalog_entry("Squats", "2026-10-18") is True
    assert led.catalog_names_on("2026-10-18") == ["Squats"]


@pytest.mark.parametrize("huge", [1e7, 1e308, -1e308, "2000000", "1e300"])
def test_rechaza_valores_desmesurados(huge):
    with pytest.raises(ValidationError):
        build_entry("Tabata", "2026-10-18", huge, "minutes", True)
    with pytest.raises(ValidationError):
        build_entry("Push-ups", "2026-10-18", 10, "reps", False, target_value=huge)


def test_acepta_el_maximo_permitido():
    _, _, e = build_entry("Walking", "2026-10-18", MAX_VALUE, "meters", True, now=TS)
    assert e.value == MAX_VALUE
