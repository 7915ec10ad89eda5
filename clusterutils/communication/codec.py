"""
Wire codec untuk values yang dikirim antar controller dan workers.

JSON tidak punya int keys dan tidak tahu MessageDictionary/Expr,
jadi type tersebut dikirim dalam bentuk tagged object: {"__type__": ...}.
"""

from typing import Any, Dict

from .remote_call import Expr, RemoteCall
from ..sync.message_dict import VALUE_TYPES, MessageDictionary

TAG = "__type__"


def encode(value: Any) -> Any:
    """Convert value ke bentuk JSON-serializable"""
    if isinstance(value, MessageDictionary):
        return {
            TAG: 'message_dict',
            'name': value.name,
            'value_type': value.value_type_name,
            'entries': [[key, encode(item)] for key, item in value.items()],
        }

    if isinstance(value, RemoteCall):
        return {
            TAG: 'expr' if isinstance(value, Expr) else 'call',
            'fn': value.fn,
            'kwargs': {k: encode(v) for k, v in value.kwargs.items()},
        }

    if isinstance(value, dict):
        if all(isinstance(key, str) for key in value) and TAG not in value:
            return {key: encode(item) for key, item in value.items()}
        return {TAG: 'dict', 'items': [[encode(k), encode(v)] for k, v in value.items()]}

    if isinstance(value, (list, tuple, set, frozenset)):
        return [encode(item) for item in value]

    return value


def decode(data: Any) -> Any:
    """Kebalikan dari encode()"""
    if isinstance(data, list):
        return [decode(item) for item in data]

    if not isinstance(data, dict):
        return data

    tag = data.get(TAG)

    if tag == 'message_dict':
        return MessageDictionary(
            data['name'],
            {int(key): decode(item) for key, item in data['entries']},
            value_type=VALUE_TYPES.get(data.get('value_type')),
        )

    if tag in ('expr', 'call'):
        cls = Expr if tag == 'expr' else RemoteCall
        return cls(data['fn'], **{k: decode(v) for k, v in data.get('kwargs', {}).items()})

    if tag == 'dict':
        return {_key(decode(k)): decode(v) for k, v in data['items']}

    return {key: decode(item) for key, item in data.items()}


def _key(key: Any) -> Any:
    # list tidak hashable, key tuple dikirim sebagai list
    return tuple(key) if isinstance(key, list) else key


def encode_call(call: RemoteCall) -> Dict[str, Any]:
    return encode(call)


def decode_call(data: Dict[str, Any]) -> RemoteCall:
    call = decode(data)
    if not isinstance(call, RemoteCall):
        raise ValueError(f"not a remote call: {data!r}")
    return call
