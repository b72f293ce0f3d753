def test_healthz(client):
    res = client.get('/healthz')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok'}


def test_index_serves_client(client):
    res = client.get('/')
    assert res.status_code == 200
    assert b'socket.io' in res.data


def test_state_snapshot(flask_app, client):
    engine = flask_app.extensions['arena']
    engine.login('sid-1', 'Alice')
    engine.join_team('sid-1', 'B')

    res = client.get('/api/state')
    assert res.status_code == 200
    state = res.get_json()
    assert state['round'] == 1
    assert state['phase'] == 'idle'
    assert state['started'] is False
    assert state['teams'] == {'A': [], 'B': ['Alice']}
    assert state['countdown_remaining'] is None
    assert state['duration'] == 30
    assert state['players'] == [{'name': 'Alice', 'team': 'B', 'alive': True}]
