import json

from parkmaster.services.settings_service import default_settings


def snapshot(client):
    data = client.get('/api/backup/download').get_data()
    data = json.loads(data)
    data.pop('backupDate')
    return data


def valid_backup():
    settings = default_settings()
    settings['siteName'] = 'Restored Lot'
    return {
        'vehicles': [
            {'id': 'v1', 'vehicleNumber': 'ABC-123', 'vehicleType': 'car',
             'entryTime': '2026-10-19T09:00:00.000Z', 'exitTime': '2026-10-19T11:01:00.000Z', 'fee': 75},
            {'id': 'v2', 'number': 'LEA 77', 'type': 'bike', 'entryTime': 1792400400000},
        ],
        'permanentClients': [
            {'id': 'c1', 'name': 'Ali Raza', 'vehicleNumber': 'LEB-4521', 'contact': '+923001234567',
             'paymentStatus': 'paid', 'paymentDate': '2026-10-01T08:00:00Z',
             'entryTime': '2026-09-01T08:00:00Z', 'monthlyFee': 3000},
        ],
        'settings': settings,
        'dailyStats': [
            {'date': '2026-10-19', 'totalCars': 1, 'totalBikes': 1, 'totalRickshaws': 0,
             'totalVehicles': 2, 'totalIncome': 75, 'vehicles': []},
        ],
    }


def seed(client, park):
    park('OLD-1')
    client.post('/api/permanent-clients', json={'name': 'Old', 'vehicleNumber': 'OLD-2', 'contact': '123'})
    client.post('/api/daily-stats', json={'date': '2026-01-01', 'totalVehicles': 1, 'totalIncome': 5})


def test_download_is_an_attachment_with_every_resource(client, park):
    seed(client, park)
    res = client.get('/api/backup/download')
    assert res.status_code == 200
    assert 'attachment' in res.headers['Content-Disposition']
    assert 'backup.json' in res.headers['Content-Disposition']
    data = json.loads(res.get_data())
    assert set(data) == {'vehicles', 'permanentClients', 'settings', 'dailyStats', 'backupDate'}
    assert data['vehicles'][0]['vehicleNumber'] == 'OLD-1'


def test_restore_replaces_all_state(client, park):
    seed(client, park)
    res = client.post('/api/backup', json=valid_backup())
    assert res.status_code == 200
    assert res.get_json()['success'] is True

    state = snapshot(client)
    assert sorted(v['id'] for v in state['vehicles']) == ['v1', 'v2']
    assert [c['id'] for c in state['permanentClients']] == ['c1']
    assert [s['date'] for s in state['dailyStats']] == ['2026-10-19']
    assert state['settings']['siteName'] == 'Restored Lot'


def test_restored_parked_vehicle_can_exit(client):
    client.post('/api/backup', json=valid_backup())
    res = client.put('/api/vehicles/v2/exit', json={'exitTime': '2026-10-19T10:00:00Z'})
    assert res.status_code == 200
    assert res.get_json()['fee'] == 20


def test_restore_with_malformed_row_leaves_store_untouched(client, park):
    seed(client, park)
    before = snapshot(client)

    backup = valid_backup()
    backup['vehicles'].append({'id': 'v3', 'vehicleType': 'car', 'entryTime': '2026-10-19T09:00:00Z'})
    res = client.post('/api/backup', json=backup)

    assert res.status_code == 400
    assert res.get_json()['success'] is False
    assert snapshot(client) == before


def test_restore_with_out_of_range_timestamp_leaves_store_untouched(client, park):
    seed(client, park)
    before = snapshot(client)

    backup = valid_backup()
    backup['vehicles'][1]['entryTime'] = 10 ** 17
    res = client.post('/api/backup', json=backup)

    assert res.status_code == 400
    assert 'entryTime' in res.get_json()['error']
    assert snapshot(client) == before


def test_restore_with_invalid_settings_leaves_store_untouched(client, park):
    seed(client, park)
    before = snapshot(client)

    backup = valid_backup()
    backup['settings'] = {'siteName': 'No pricing'}
    assert client.post('/api/backup', json=backup).status_code == 400
    assert snapshot(client) == before


def test_restore_failing_in_the_store_is_rolled_back(client, park):
    seed(client, park)
    before = snapshot(client)

    backup = valid_backup()
    backup['vehicles'].append(dict(backup['vehicles'][0]))  # duplicate primary key
    res = client.post('/api/backup', json=backup)

    assert res.status_code == 500
    assert snapshot(client) == before


def test_restore_rejects_fee_without_exit(client):
    backup = valid_backup()
    backup['vehicles'][1]['fee'] = 10
    assert client.post('/api/backup', json=backup).status_code == 400


def test_empty_settings_keep_current_settings(client):
    backup = valid_backup()
    backup['settings'] = {}
    assert client.post('/api/backup', json=backup).status_code == 200
    assert client.get('/api/settings').get_json()['siteName'] == 'Park Master Pro'
