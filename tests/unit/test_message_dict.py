"""
Unit tests untuk MessageDictionary dan wire codec.
"""

import json
import pytest
from clusterutils.communication.codec import decode, encode
from clusterutils.communication.remote_call import Expr, RemoteCall
from clusterutils.sync.errors import UnboundNameError, error_from_dict
from clusterutils.sync.message_dict import MessageDictionary
from clusterutils.sync.results import ExchangeResult, Failure


def test_zeros():
    msgs = MessageDictionary.zeros('msgs', [2, 3, 4])

    assert msgs.name == 'msgs'
    assert len(msgs) == 3
    assert msgs == {2: 0, 3: 0, 4: 0}
    assert list(msgs) == [2, 3, 4]


def test_declared_value_type_is_enforced():
    msgs = MessageDictionary.zeros('msgs', [1, 2], fill=0.0, value_type=float)

    msgs[1] = 2.5
    msgs[2] = 3  # int diterima di dictionary float

    with pytest.raises(TypeError):
        msgs[1] = 'not a number'


def test_keys_must_be_worker_ids():
    msgs = MessageDictionary('msgs')

    with pytest.raises(TypeError):
        msgs['2'] = 1


def test_copy_is_independent():
    msgs = MessageDictionary('msgs', {1: 10})
    other = msgs.copy()
    other[1] = 99

    assert msgs[1] == 10


def test_message_dict_survives_json():
    """JSON object keys selalu string, worker id harus tetap int"""
    msgs = MessageDictionary('msgs', {2: 20, 3: [1, 2]}, value_type=None)

    wire = json.loads(json.dumps(encode(msgs)))
    decoded = decode(wire)

    assert isinstance(decoded, MessageDictionary)
    assert decoded == msgs
    assert sorted(decoded.keys()) == [2, 3]


def test_typed_message_dict_keeps_value_type():
    msgs = MessageDictionary.zeros('msgs', [1], fill=0, value_type=int)

    decoded = decode(json.loads(json.dumps(encode(msgs))))

    assert decoded.value_type is int
    with pytest.raises(TypeError):
        decoded[1] = 'x'


def test_expr_and_call_keep_their_kind():
    call = RemoteCall("bind", name='x', value=Expr("scaled_id", factor=2))

    decoded = decode(json.loads(json.dumps(encode(call))))

    assert type(decoded) is RemoteCall
    assert type(decoded.kwargs['value']) is Expr
    assert decoded == call


def test_int_keyed_dict_survives_json():
    data = {'entries': {2: 'a', 3: 'b'}}

    assert decode(json.loads(json.dumps(encode(data)))) == data


def test_error_from_dict_rebuilds_unbound_name():
    error = UnboundNameError(4, 'msgs', 'main')

    rebuilt = error_from_dict(json.loads(json.dumps(error.to_dict())))

    assert isinstance(rebuilt, UnboundNameError)
    assert rebuilt.worker_id == 4
    assert rebuilt.name == 'msgs'


def test_exchange_result_failed_workers():
    result = ExchangeResult('swap', {2: 'ok'}, [
        Failure(target=2, operation='swap', kind='unreachable', reason='down', source=4),
        Failure(target=4, operation='swap', kind='unreachable', reason='down'),
    ])

    assert result.partial
    assert result.failed_workers == {4}


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
