from flask import current_app, request

from arena import socketio

NAMESPACE = '/'


class SocketIONotifier:
    """Delivers engine notifications over Socket.IO.

    ``to=None`` broadcasts to every connected client; otherwise the event
    goes to the single connection with that sid.
    """

    def __init__(self, sio, namespace: str = NAMESPACE):
        self.sio = sio
        self.namespace = namespace

    def emit(self, event, payload=None, to=None):
        args = () if payload is None else (payload,)
        self.sio.emit(event, *args, to=to, namespace=self.namespace)


def _engine():
    return current_app.extensions['arena']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _unwrap(data, key):
    """Clients send either the bare value or {key: value}."""
    if isinstance(data, dict):
        return data.get(key)
    return data


def handle_connect(auth=None):
    _engine().welcome(_get_sid())


def handle_disconnect(*args):
    _engine().disconnect(_get_sid())


def handle_login(data=None):
    _engine().login(_get_sid(), _unwrap(data, 'name'))


def handle_join_team(data=None):
    _engine().join_team(_get_sid(), _unwrap(data, 'team'))


def handle_click(data=None):
    _engine().score(_get_sid(), _unwrap(data, 'team'))


def handle_continue_next_round(data=None):
    choice = _unwrap(data, 'choice')
    if not isinstance(choice, bool):
        current_app.logger.info(f"[continue-ignored] sid={_get_sid()} choice={choice!r}")
        return
    _engine().continue_next_round(_get_sid(), choice)


def handle_admin_action(data=None):
    _engine().admin_action(_unwrap(data, 'action'), requested_by=_get_sid())


def register_socketio_handlers(namespace: str = NAMESPACE) -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('login', handle_login, namespace=namespace)
    socketio.on_event('joinTeam', handle_join_team, namespace=namespace)
    socketio.on_event('click', handle_click, namespace=namespace)
    socketio.on_event('continueNextRound', handle_continue_next_round, namespace=namespace)
    socketio.on_event('adminAction', handle_admin_action, namespace=namespace)
