import jwt

from conftest import blank_with, blank_without


def create_profile(client, auth_header, uid, nickname):
    response = client.post('/api/profile', json={'nickname': nickname}, headers=auth_header(uid))
    assert response.status_code == 201
    return response.get_json()['profile']


def create_room(client, auth_header, uid, **settings):
    response = client.post('/api/rooms', json=settings, headers=auth_header(uid))
    assert response.status_code == 201
    return response.get_json()['room_code']


def test_requests_without_token_are_rejected(client):
    response = client.get('/api/profile')
    assert response.status_code == 401
    assert response.get_json()['success'] is False


def test_requests_with_bad_signature_are_rejected(client):
    token = jwt.encode({'sub': 'uid-alice'}, 'some-other-secret-of-sufficient-length', algorithm='HS256')
    response = client.get('/api/profile', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 401
    assert response.get_json()['error'] == 'Invalid token'


def test_profile_lifecycle(client, auth_header):
    assert client.get('/api/profile', headers=auth_header('uid-alice')).status_code == 404

    profile = create_profile(client, auth_header, 'uid-alice', 'Alice')
    assert profile == {'uid': 'uid-alice', 'nickname': 'Alice'}

    response = client.get('/api/profile', headers=auth_header('uid-alice'))
    body = response.get_json()
    assert body['profile']['nickname'] == 'Alice'
    assert body['profile']['stats'] == {'games_played': 0, 'games_won': 0}


def test_nickname_conflict_reports_error_code(client, auth_header):
    create_profile(client, auth_header, 'uid-alice', 'Alice')

    response = client.post('/api/profile', json={'nickname': 'alice'}, headers=auth_header('uid-bob'))
    body = response.get_json()
    assert response.status_code == 409
    assert body['code'] == 'NicknameTakenError'
    assert body['retryable'] is False


def test_invalid_nickname_is_bad_request(client, auth_header):
    response = client.post('/api/profile', json={'nickname': 'no spaces'}, headers=auth_header('uid-alice'))
    assert response.status_code == 400
    assert response.get_json()['code'] == 'ValidationError'


def test_profile_without_nickname_gets_generated_one(client, auth_header):
    response = client.post('/api/profile', json={}, headers=auth_header('uid-alice'))
    assert response.status_code == 201
    assert response.get_json()['profile']['nickname']


def test_suggest_nickname(client, auth_header):
    response = client.get('/api/profile/suggest', headers=auth_header('uid-alice'))
    assert response.status_code == 200
    assert response.get_json()['nickname']


def test_create_room_creates_profile_on_first_use(client, auth_header, services):
    code = create_room(client, auth_header, 'uid-new', difficulty='hard')

    assert services.profiles.lookup_profile('uid-new') is not None
    room = services.lobby.get_room(code)
    assert room.settings.difficulty == 'hard'

    response = client.get('/api/rooms', headers=auth_header('uid-new'))
    assert [r['code'] for r in response.get_json()['rooms']] == [code]


def test_create_room_rejects_bad_settings(client, auth_header):
    response = client.post('/api/rooms', json={'difficulty': 'nightmare'}, headers=auth_header('uid-a'))
    assert response.status_code == 400

    response = client.post('/api/rooms', json={'time_limit': -5}, headers=auth_header('uid-a'))
    assert response.status_code == 400


def test_unknown_room_is_not_found(client, auth_header):
    response = client.get('/api/rooms/NOPE22', headers=auth_header('uid-alice'))
    body = response.get_json()
    assert response.status_code == 404
    assert body['code'] == 'RoomNotFoundError'


def test_join_leave_and_start(client, auth_header):
    create_profile(client, auth_header, 'uid-alice', 'Alice')
    create_profile(client, auth_header, 'uid-bob', 'Bob')
    code = create_room(client, auth_header, 'uid-alice')

    response = client.post(f'/api/rooms/{code}/join', headers=auth_header('uid-bob'))
    assert response.status_code == 200
    assert [p['nickname'] for p in response.get_json()['room']['players']] == ['Alice', 'Bob']

    response = client.post(f'/api/rooms/{code}/join', headers=auth_header('uid-bob'))
    assert response.status_code == 409
    assert response.get_json()['code'] == 'AlreadyJoinedError'

    response = client.post(f'/api/rooms/{code}/leave', headers=auth_header('uid-bob'))
    assert response.status_code == 200

    response = client.post(f'/api/rooms/{code}/start', headers=auth_header('uid-alice'))
    assert response.status_code == 409
    assert response.get_json()['code'] == 'TooFewPlayersError'

    client.post(f'/api/rooms/{code}/join', headers=auth_header('uid-bob'))

    response = client.post(f'/api/rooms/{code}/start', headers=auth_header('uid-bob'))
    assert response.status_code == 409

    response = client.post(f'/api/rooms/{code}/start', json={'difficulty': 'easy'},
                           headers=auth_header('uid-alice'))
    body = response.get_json()
    assert response.status_code == 200
    assert body['warnings'] == []
    assert body['room']['status'] == 'active'
    assert body['room']['game']['solution'] is None
    assert body['room']['game']['next_move_number'] == 1


def test_moves_over_http(client, auth_header, services):
    create_profile(client, auth_header, 'uid-alice', 'Alice')
    create_profile(client, auth_header, 'uid-bob', 'Bob')
    code = create_room(client, auth_header, 'uid-alice')
    client.post(f'/api/rooms/{code}/join', headers=auth_header('uid-bob'))
    client.post(f'/api/rooms/{code}/start', headers=auth_header('uid-alice'))

    response = client.post(f'/api/rooms/{code}/moves', json={}, headers=auth_header('uid-alice'))
    assert response.status_code == 400

    room = services.lobby.get_room(code)
    position = blank_with(room, room.game.current_number)

    response = client.post(f'/api/rooms/{code}/moves', json={'position': position},
                           headers=auth_header('uid-bob'))
    assert response.status_code == 409
    assert response.get_json()['code'] == 'NotYourTurnError'

    response = client.post(f'/api/rooms/{code}/moves',
                           json={'position': position, 'expected_move_number': 1},
                           headers=auth_header('uid-alice'))
    body = response.get_json()
    assert response.status_code == 200
    assert body['is_correct'] is True
    assert body['move']['move_number'] == 1
    assert body['game_over'] is False
    assert body['room']['game']['next_move_number'] == 2

    response = client.post(f'/api/rooms/{code}/moves',
                           json={'position': position, 'expected_move_number': 1},
                           headers=auth_header('uid-alice'))
    body = response.get_json()
    assert response.status_code == 409
    assert body['code'] == 'StaleRequestError'
    assert body['details']['next_move_number'] == 2

    response = client.get(f'/api/rooms/{code}/moves', headers=auth_header('uid-bob'))
    assert response.get_json()['count'] == 1

    response = client.get(f'/api/rooms/{code}/game_over', headers=auth_header('uid-bob'))
    assert response.get_json() == {'success': True, 'game_over': False, 'winner': None}


def test_full_game_over_http(client, auth_header, services):
    create_profile(client, auth_header, 'uid-alice', 'Alice')
    create_profile(client, auth_header, 'uid-bob', 'Bob')
    code = create_room(client, auth_header, 'uid-alice')
    client.post(f'/api/rooms/{code}/join', headers=auth_header('uid-bob'))
    client.post(f'/api/rooms/{code}/start', headers=auth_header('uid-alice'))

    body = None
    turns = [('uid-alice', True), ('uid-bob', False)] * 5
    for uid, correct in turns:
        room = services.lobby.get_room(code)
        digit = room.game.current_number
        position = blank_with(room, digit) if correct else blank_without(room, digit)
        response = client.post(f'/api/rooms/{code}/moves', json={'position': position},
                               headers=auth_header(uid))
        assert response.status_code == 200
        body = response.get_json()

    assert body['game_over'] is True
    assert body['winner'] == 'uid-alice'
    assert body['room']['status'] == 'finished'
    assert body['room']['winner_nickname'] == 'Alice'
    assert body['room']['game']['solution'] is not None

    response = client.get(f'/api/rooms/{code}/game_over', headers=auth_header('uid-alice'))
    assert response.get_json()['winner'] == 'Alice'

    stats = client.get('/api/profile', headers=auth_header('uid-alice')).get_json()['profile']['stats']
    assert stats == {'games_played': 1, 'games_won': 1}
    stats = client.get('/api/profile', headers=auth_header('uid-bob')).get_json()['profile']['stats']
    assert stats == {'games_played': 1, 'games_won': 0}

    response = client.post(f'/api/rooms/{code}/moves', json={'position': 2},
                           headers=auth_header('uid-alice'))
    assert response.status_code == 409
    assert response.get_json()['code'] == 'GameNotStartedError'
