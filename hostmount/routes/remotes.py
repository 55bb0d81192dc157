"""Remote share (SMB/NFS) API endpoints."""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from remotes import RemoteMountManager

remotes_api = Blueprint('remotes_api', __name__)


def _manager() -> RemoteMountManager:
    return current_app.extensions['remote_mount_manager']


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@remotes_api.route('/api/remotes', methods=['GET'])
def list_remotes():
    return jsonify(_manager().list())


@remotes_api.route('/api/remotes', methods=['POST'])
def create_remote():
    return jsonify(_manager().create(_payload())), 201


@remotes_api.route('/api/remotes/unmount-all', methods=['POST'])
def unmount_all_remotes():
    return jsonify(_manager().unmount_all().to_dict())


@remotes_api.route('/api/remotes/listshares', methods=['POST'])
def list_server_shares():
    """Discover shares on a server without saving anything."""
    data = _payload()
    shares = _manager().list_server_shares(
        data.get('server'),
        data.get('type'),
        data.get('username'),
        data.get('password'),
        data.get('domain'),
    )
    return jsonify(shares)


@remotes_api.route('/api/remotes/connectiontest', methods=['POST'])
def connection_test():
    result = _manager().connection_test(_payload())
    return jsonify(result.to_dict())


@remotes_api.route('/api/remotes/<remote_id>', methods=['GET'])
def get_remote(remote_id: str):
    return jsonify(_manager().get(remote_id))


@remotes_api.route('/api/remotes/<remote_id>', methods=['PUT'])
def update_remote(remote_id: str):
    return jsonify(_manager().update(remote_id, _payload()))


@remotes_api.route('/api/remotes/<remote_id>', methods=['DELETE'])
def delete_remote(remote_id: str):
    removed = _manager().delete(remote_id)
    return jsonify({"message": f"Remote '{removed['name']}' deleted successfully", "remote": removed})


@remotes_api.route('/api/remotes/<remote_id>/mount', methods=['POST'])
def mount_remote(remote_id: str):
    return jsonify(_manager().mount(remote_id).to_dict())


@remotes_api.route('/api/remotes/<remote_id>/unmount', methods=['POST'])
def unmount_remote(remote_id: str):
    return jsonify(_manager().unmount(remote_id).to_dict())


@remotes_api.route('/api/remotes/<remote_id>/status', methods=['GET'])
def remote_status(remote_id: str):
    return jsonify(_manager().status(remote_id).to_dict())
