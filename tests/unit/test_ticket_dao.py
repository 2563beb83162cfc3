import pytest

from dao import DaoError
from entities import DayOfWeek, Show, Ticket, TimeOfDay


@pytest.fixture()
def show(show_dao):
    show = Show(
        day=DayOfWeek.FRIDAY,
        time=TimeOfDay.EVENING,
        movie="Inception",
        tickets=[Ticket(row=1, seat=1, price=10), Ticket(row=1, seat=2, price=10)],
    )
    show_dao.create(show)
    return show


@pytest.fixture()
def buyers(make_user):
    return make_user("alice@example.com"), make_user("bob@example.com")


def test_create_assigns_id_and_show(ticket_dao, show):
    ticket = Ticket(row=2, seat=5, price=12)
    ticket_dao.create(ticket, show.id)

    assert ticket.id == 3
    assert ticket.show_id == show.id
    assert ticket_dao.find(ticket.id) == Ticket(id=3, row=2, seat=5, price=12, sold=False, show_id=show.id)


def test_create_keeps_the_sold_state(ticket_dao, show):
    ticket = Ticket(row=2, seat=1, price=12, sold=True)
    ticket_dao.create(ticket, show.id)
    assert ticket_dao.find(ticket.id).sold is True


def test_create_for_missing_show_fails(ticket_dao):
    ticket = Ticket(row=1, seat=1, price=10)
    with pytest.raises(DaoError):
        ticket_dao.create(ticket, 999)
    assert ticket.id is None


def test_update_overwrites_ticket(ticket_dao, show_dao, show):
    other = Show(day=DayOfWeek.MONDAY, time=TimeOfDay.MORNING, movie="Arrival")
    show_dao.create(other)
    ticket = ticket_dao.find(1)

    ticket.row, ticket.seat, ticket.price, ticket.sold = 4, 7, 20, True
    ticket_dao.update(ticket, other.id)

    assert ticket_dao.find(1) == Ticket(id=1, row=4, seat=7, price=20, sold=True, show_id=other.id)
    assert [t.id for t in ticket_dao.find_by_show(show.id)] == [2]


def test_delete_removes_sold_ticket(ticket_dao, show, buyers):
    ticket_dao.buy_ticket(1, buyers[0].id)
    ticket_dao.delete(1)
    assert ticket_dao.find(1) is None
    assert ticket_dao.find_by_user(buyers[0].id) == []


def test_find_all_and_by_state(ticket_dao, show, buyers):
    ticket_dao.buy_ticket(2, buyers[0].id)

    assert [t.id for t in ticket_dao.find_all()] == [1, 2]
    assert [t.id for t in ticket_dao.find_by_state(True)] == [2]
    assert [t.id for t in ticket_dao.find_by_state(False)] == [1]


def test_buy_ticket_marks_sold_for_user(ticket_dao, show, buyers):
    alice, _ = buyers
    ticket_dao.buy_ticket(1, alice.id)

    ticket = ticket_dao.find(1)
    assert ticket.sold is True
    assert ticket.user_id == alice.id
    assert [t.id for t in ticket_dao.find_by_user(alice.id)] == [1]


# the unguarded purchase lets a second buyer overwrite the first one
def test_buy_ticket_twice_last_write_wins(ticket_dao, show, buyers):
    alice, bob = buyers
    ticket_dao.buy_ticket(1, alice.id)
    ticket_dao.buy_ticket(1, bob.id)

    ticket = ticket_dao.find(1)
    assert ticket.sold is True
    assert ticket.user_id == bob.id


# the guarded purchase keeps the first buyer
def test_buy_unsold_ticket_refuses_second_buyer(ticket_dao, show, buyers):
    alice, bob = buyers
    assert ticket_dao.buy_unsold_ticket(1, alice.id) is True
    assert ticket_dao.buy_unsold_ticket(1, bob.id) is False

    ticket = ticket_dao.find(1)
    assert ticket.sold is True
    assert ticket.user_id == alice.id


def test_buy_unsold_ticket_missing_ticket(ticket_dao, buyers):
    assert ticket_dao.buy_unsold_ticket(999, buyers[0].id) is False


def test_deleting_user_releases_ticket_reference(ticket_dao, user_dao, show, buyers):
    alice, _ = buyers
    ticket_dao.buy_ticket(1, alice.id)
    user_dao.delete(alice.id)

    ticket = ticket_dao.find(1)
    assert ticket.user_id is None
    assert ticket.sold is True
