from datetime import date

import pytest
from sqlalchemy import event

from app.schemas.subscription import SubscriptionCreate


@pytest.fixture
def suscripciones(repository):
    # A: 100 de 01-2024 a 03-2024, B: 200 desde 02-2024 sin fin
    a = repository.create(SubscriptionCreate(
        service_name="A", price=100, user_id="user-a",
        start_date=date(2024, 1, 1), end_date=date(2024, 3, 1),
    ))
    b = repository.create(SubscriptionCreate(
        service_name="B", price=200, user_id="user-b",
        start_date=date(2024, 2, 1),
    ))
    return a, b


def test_suma_el_precio_por_cada_mes_activo(repository, suscripciones):
    # A: 3 x 100, B: 2 x 200
    assert repository.total_cost(date(2024, 1, 1), date(2024, 3, 1)) == 700


def test_un_solo_mes(repository, suscripciones):
    assert repository.total_cost(date(2024, 2, 1), date(2024, 2, 1)) == 300


def test_el_dia_no_cambia_el_resultado(repository, suscripciones):
    assert repository.total_cost(date(2024, 1, 31), date(2024, 3, 15)) == 700


def test_filtro_por_usuario(repository, suscripciones):
    assert repository.total_cost(date(2024, 1, 1), date(2024, 3, 1), user_id="user-a") == 300
    assert repository.total_cost(date(2024, 1, 1), date(2024, 3, 1), user_id="user-b") == 400


def test_filtro_por_servicio(repository, suscripciones):
    assert repository.total_cost(date(2024, 1, 1), date(2024, 3, 1), service_name="B") == 400
    assert repository.total_cost(date(2024, 1, 1), date(2024, 3, 1), user_id="user-a", service_name="B") == 0


def test_filtro_que_excluye_todo_da_cero(repository, suscripciones):
    assert repository.total_cost(date(2024, 1, 1), date(2024, 3, 1), user_id="nadie") == 0


def test_filtros_en_blanco_se_ignoran(repository, suscripciones):
    assert repository.total_cost(date(2024, 1, 1), date(2024, 3, 1), user_id=" ", service_name="") == 700


def test_sin_suscripciones_da_cero(repository):
    assert repository.total_cost(date(2024, 1, 1), date(2024, 12, 1)) == 0


def test_rango_fuera_de_toda_suscripcion(repository, suscripciones):
    assert repository.total_cost(date(2023, 1, 1), date(2023, 12, 1)) == 0


def test_end_date_es_inclusivo(repository, suscripciones):
    # En 03-2024 A todavía está activa; en 04-2024 ya no
    assert repository.total_cost(date(2024, 3, 1), date(2024, 3, 1)) == 300
    assert repository.total_cost(date(2024, 4, 1), date(2024, 4, 1)) == 200


def test_rango_invertido_da_cero(repository, suscripciones):
    assert repository.total_cost(date(2024, 3, 1), date(2024, 1, 1)) == 0


def test_rango_largo_en_una_sola_consulta(engine, repository):
    repository.create(SubscriptionCreate(
        service_name="Largo", price=10, user_id="u", start_date=date(2000, 1, 1),
    ))
    sumas = []

    def contar_sumas(conn, cursor, statement, parameters, context, executemany):
        if "sum(" in statement.lower():
            sumas.append(statement)

    event.listen(engine, "before_cursor_execute", contar_sumas)
    try:
        # 1200 meses: más que el límite de términos de un UNION ALL en SQLite
        total = repository.total_cost(date(1950, 1, 1), date(2049, 12, 1))
    finally:
        event.remove(engine, "before_cursor_execute", contar_sumas)

    assert total == 50 * 12 * 10
    assert len(sumas) == 1


def test_rango_que_cruza_el_anio(repository):
    repository.create(SubscriptionCreate(
        service_name="Anual", price=5, user_id="u",
        start_date=date(2023, 11, 1), end_date=date(2024, 2, 1),
    ))
    # 11-2023, 12-2023, 01-2024, 02-2024
    assert repository.total_cost(date(2023, 1, 1), date(2024, 12, 1)) == 20
