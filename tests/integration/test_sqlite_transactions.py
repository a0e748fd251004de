from src.infrastructure.db.models import Customer
from src.infrastructure.db.session import SERIALIZABLE, _begin_statement


def test_only_serializable_transactions_begin_immediate():
    assert _begin_statement({}) == "BEGIN"
    assert _begin_statement({"isolation_level": "READ COMMITTED"}) == "BEGIN"
    assert _begin_statement({"isolation_level": SERIALIZABLE}) == "BEGIN IMMEDIATE"


def test_open_read_does_not_block_serializable_writer(session_factory, make_customer):
    customer = make_customer()

    reader = session_factory()
    writer = session_factory()
    try:
        # holds a read transaction open, as a request session does between queries
        assert reader.get(Customer, customer.id).email == customer.email

        # would wait for the sqlite busy timeout if reads took the write lock
        writer.connection(execution_options={"isolation_level": SERIALIZABLE})
        writer.add(Customer(email="late@example.com", first_name="Late", last_name="Comer"))
        writer.flush()

        reader.close()
        writer.commit()
    finally:
        reader.close()
        writer.close()

    with session_factory() as check:
        assert check.query(Customer).count() == 2
