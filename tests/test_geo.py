import pytest

from gymxp.utils.geo import has_fix, haversine


def test_un_grado_de_longitud_en_el_ecuador():
    assert haversine(0, 0, 0, 1) == pytest.approx(111.19, abs=0.01)


def test_misma_posicion_es_cero():
    assert haversine(40.4168, -3.7038, 40.4168, -3.7038) == pytest.approx(0.0)


def test_simetrica():
    a = haversine(40.4168, -3.7038, 41.3874, 2.1686)   # Madrid -> Barcelona
    b = haversine(41.3874, 2.1686, 40.4168, -3.7038)
    assert a == pytest.approx(b)
    assert 480 < a < 520


def test_has_fix():
    assert has_fix(0, 0)
    assert has_fix("40.1", "-3.2")
    assert not has_fix(None, 3)
    assert not has_fix(91, 0)
    assert not has_fix("x", 0)
