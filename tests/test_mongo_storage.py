from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from sudoku_duel.storage import MongoStorage, RoomCodeCollision

from conftest import NOW, make_room


@pytest.fixture()
def mongo_storage():
    return MongoStorage(MagicMock(), 'sudoku_duel_test')


def test_insert_room_refuses_code_with_leftover_moves(mongo_storage):
    mongo_storage.moves.count_documents.return_value = 1

    with pytest.raises(RoomCodeCollision):
        mongo_storage.insert_room(make_room())

    mongo_storage.moves.count_documents.assert_called_once_with({"room_code": 'ABC234'}, limit=1)
    mongo_storage.rooms.insert_one.assert_not_called()


def test_insert_room_with_unused_code(mongo_storage):
    mongo_storage.moves.count_documents.return_value = 0

    mongo_storage.insert_room(make_room())

    doc = mongo_storage.rooms.insert_one.call_args[0][0]
    assert doc['_id'] == 'ABC234'
    assert doc['version'] == 0


def test_delete_expired_rooms_drops_their_moves(mongo_storage):
    now = NOW + timedelta(hours=3)
    mongo_storage.rooms.find.return_value = [{'_id': 'AAA222'}, {'_id': 'BBB333'}]
    mongo_storage.rooms.delete_many.return_value.deleted_count = 2

    assert mongo_storage.delete_expired_rooms(now) == 2

    mongo_storage.rooms.delete_many.assert_called_once_with(
        {"_id": {"$in": ['AAA222', 'BBB333']}, "expire_at": {"$lte": now}}
    )
    mongo_storage.moves.delete_many.assert_called_once_with(
        {"room_code": {"$in": ['AAA222', 'BBB333']}}
    )


def test_delete_expired_rooms_with_nothing_expired(mongo_storage):
    mongo_storage.rooms.find.return_value = []

    assert mongo_storage.delete_expired_rooms(NOW) == 0
    mongo_storage.rooms.delete_many.assert_not_called()
    mongo_storage.moves.delete_many.assert_not_called()
