"""
Tests for past-user records and their eye tests
"""
from conftest import flashed

from opticare.components.admin_past_users.service import as_list

BASE = '/api/admin/past-users'

RECORDS = [
    {'publicId': 'p1', 'name': 'Nimal Fernando', 'phone': '0712345678', 'email': 'nimal@example.com', 'age': 52},
    {'publicId': 'p2', 'name': 'Sunethra Dias', 'phone': '0723456789'},
]

TEST = {
    'id': 'e1',
    'testDate': '2024-01-15',
    'bookingDate': '2024-01-15',
    'deliveryDate': '2024-01-22',
    'frame': 'Half rim',
    'nvLeftEye': {'sph': 1.5, 'add': 2.0},
}

DISTANCE_NEAR = {'dvRightEye.sph': '-0.75', 'nvLeftEye.add': '2.25'}
INTERMEDIATE = {'imRightEye.sph': '0.5'}
DETAILS = {'frame': 'Full rim', 'lens': '', 'notes': '', 'testDate': '2024-05-01', 'bookingDate': '2024-05-01',
           'deliveryDate': '2024-05-10'}


def test_as_list():
    assert as_list([{'a': 1}]) == [{'a': 1}]
    assert as_list({'a': 1}) == [{'a': 1}]
    assert as_list(None) == []
    assert as_list({}) == []


def test_list_all_records(admin_client, backend):
    backend.on('GET', BASE + '/', RECORDS)
    html = admin_client.get('/admin/past-users').data.decode()
    assert 'Nimal Fernando' in html
    assert '/admin/past-users/p1' in html
    assert 'New past user' not in html


def test_numeric_search_looks_up_phone(admin_client, backend):
    backend.on('GET', BASE + '/by-phone', RECORDS[0])
    html = admin_client.get('/admin/past-users?q=0712345678').data.decode()
    assert backend.last('GET', BASE + '/by-phone')['params'] == {'phone': '0712345678'}
    assert 'Nimal Fernando' in html


def test_name_search(admin_client, backend):
    backend.on('GET', BASE + '/search', [RECORDS[1]])
    html = admin_client.get('/admin/past-users?q=Sunethra').data.decode()
    assert backend.last('GET', BASE + '/search')['params'] == {'name': 'Sunethra'}
    assert 'Sunethra Dias' in html
    assert 'Nimal Fernando' not in html


def test_search_without_matches(admin_client, backend):
    backend.fail('GET', BASE + '/search', 404, 'No users found')
    html = admin_client.get('/admin/past-users?q=nobody').data.decode()
    assert 'No records found.' in html
    assert flashed(admin_client) == []


def test_new_record_form_is_shown_on_request(admin_client, backend):
    backend.on('GET', BASE + '/', [])
    html = admin_client.get('/admin/past-users?new=1').data.decode()
    assert 'New past user' in html


def test_create_record(admin_client, backend):
    backend.on('POST', BASE + '/', {'publicId': 'p3', 'name': 'Ruwan'})
    response = admin_client.post('/admin/past-users', data={
        'name': 'Ruwan', 'phone': '0751112222', 'email': '', 'age': '', 'address': '',
    })
    assert response.headers['Location'].endswith('/admin/past-users/p3')
    assert backend.last('POST', BASE + '/')['json'] == {'name': 'Ruwan', 'phone': '0751112222'}
    assert 'User Created' in flashed(admin_client)


def test_create_record_validation(admin_client, backend):
    backend.on('GET', BASE + '/', [])
    response = admin_client.post('/admin/past-users', data={'name': 'R', 'phone': '075'})
    assert response.status_code == 400
    html = response.data.decode()
    assert 'Name is required' in html
    assert 'Phone number is required' in html
    assert not backend.called('POST', BASE + '/')


def test_create_record_backend_failure(admin_client, backend):
    backend.on('GET', BASE + '/', [])
    backend.fail('POST', BASE + '/', 409, 'Phone already recorded')
    response = admin_client.post('/admin/past-users', data={'name': 'Ruwan', 'phone': '0751112222'})
    assert response.status_code == 400
    assert b'Phone already recorded' in response.data


def test_record_page(admin_client, backend):
    backend.on('GET', BASE + '/p1', RECORDS[0])
    backend.on('GET', BASE + '/p1/eye-tests', [TEST])
    html = admin_client.get('/admin/past-users/p1').data.decode()
    assert 'Nimal Fernando' in html
    assert 'Test on 2024-01-15' in html
    assert '/admin/past-users/p1/tests/e1/edit' in html


def test_record_page_edit_mode(admin_client, backend):
    backend.on('GET', BASE + '/p1', RECORDS[0])
    backend.on('GET', BASE + '/p1/eye-tests', [])
    html = admin_client.get('/admin/past-users/p1?edit=1').data.decode()
    assert 'Edit Nimal Fernando' in html
    assert 'value="0712345678"' in html


def test_missing_record_redirects_to_list(admin_client, backend):
    backend.fail('GET', BASE + '/p9', 404, 'Not found')
    response = admin_client.get('/admin/past-users/p9')
    assert response.headers['Location'].endswith('/admin/past-users')


def test_update_record(admin_client, backend):
    backend.on('PUT', BASE + '/p1', {})
    response = admin_client.post('/admin/past-users/p1', data={
        'name': 'Nimal Fernando', 'phone': '0712345678', 'age': '53', 'email': '', 'address': 'Kandy',
    })
    assert response.headers['Location'].endswith('/admin/past-users/p1')
    assert backend.last('PUT', BASE + '/p1')['json'] == {
        'name': 'Nimal Fernando', 'phone': '0712345678', 'age': 53, 'address': 'Kandy',
    }
    assert 'User Updated' in flashed(admin_client)


def test_update_record_validation_keeps_edit_form(admin_client, backend):
    backend.on('GET', BASE + '/p1', RECORDS[0])
    backend.on('GET', BASE + '/p1/eye-tests', [])
    response = admin_client.post('/admin/past-users/p1', data={'name': 'Nimal', 'phone': '0712345678',
                                                              'email': 'not-an-email'})
    assert response.status_code == 400
    assert b'Invalid email address' in response.data
    assert not backend.called('PUT', BASE + '/p1')


def test_delete_record(admin_client, backend):
    backend.on('DELETE', BASE + '/p1', None)
    response = admin_client.post('/admin/past-users/p1/delete')
    assert response.headers['Location'].endswith('/admin/past-users')
    assert 'User Deleted' in flashed(admin_client)


def test_new_record_with_eye_test(admin_client, backend):
    backend.on('POST', BASE + '/', {'publicId': 'p4'})

    page = admin_client.get('/admin/past-users/new-with-test').data.decode()
    assert 'New Past User with Eye Test' in page

    admin_client.post('/admin/past-users/new-with-test', data={'name': 'Ruwan', 'phone': '0751112222', 'age': '40'})
    admin_client.post('/admin/past-users/new-with-test', data={'dvLeftEye.sph': '-2', 'dvLeftEye.cyl': '-0.75'})
    response = admin_client.post('/admin/past-users/new-with-test', data=DETAILS)

    assert response.headers['Location'].endswith('/admin/past-users/p4')
    payload = backend.last('POST', BASE + '/')['json']
    assert payload['name'] == 'Ruwan'
    assert payload['age'] == 40
    assert payload['dvLeftEye'] == {'sph': -2.0, 'cyl': -0.75}
    assert payload['dvRightEye'] == {'sph': 0.0}
    assert payload['testDate'] == '2024-05-01'
    assert 'User Record Created' in flashed(admin_client)


def test_add_eye_test_to_record(admin_client, backend):
    backend.on('POST', BASE + '/p1/eye-tests', {})

    admin_client.post('/admin/past-users/p1/tests/new')
    assert 'Add New Eye Test' in admin_client.get('/admin/past-users/p1/tests/form').data.decode()

    admin_client.post('/admin/past-users/p1/tests/form', data=DISTANCE_NEAR)
    admin_client.post('/admin/past-users/p1/tests/form', data=INTERMEDIATE)
    response = admin_client.post('/admin/past-users/p1/tests/form', data=DETAILS)

    assert response.headers['Location'].endswith('/admin/past-users/p1')
    payload = backend.last('POST', BASE + '/p1/eye-tests')['json']
    assert payload['dvRightEye'] == {'sph': -0.75}
    assert payload['nvLeftEye'] == {'sph': 0.0, 'add': 2.25}
    assert payload['imRightEye'] == {'sph': 0.5}
    assert payload['frame'] == 'Full rim'
    assert 'name' not in payload
    assert 'Test Added' in flashed(admin_client)


def test_edit_eye_test_of_record(admin_client, backend):
    backend.on('GET', BASE + '/p1/eye-tests', [TEST])
    backend.on('PUT', BASE + '/eye-tests/e1', {})

    admin_client.post('/admin/past-users/p1/tests/e1/edit')
    page = admin_client.get('/admin/past-users/p1/tests/form').data.decode()
    assert 'Edit Eye Test' in page
    assert 'name="nvLeftEye.add" value="2.0"' in page

    admin_client.post('/admin/past-users/p1/tests/form', data={'nvLeftEye.sph': '1.5', 'nvLeftEye.add': '2.5'})
    admin_client.post('/admin/past-users/p1/tests/form', data={})
    admin_client.post('/admin/past-users/p1/tests/form', data=DETAILS)

    payload = backend.last('PUT', BASE + '/eye-tests/e1')['json']
    assert payload['nvLeftEye'] == {'sph': 1.5, 'add': 2.5}
    assert 'Test Updated' in flashed(admin_client)


def test_eye_test_form_of_other_record_redirects(admin_client, backend):
    admin_client.post('/admin/past-users/p1/tests/new')
    response = admin_client.get('/admin/past-users/p2/tests/form')
    assert response.headers['Location'].endswith('/admin/past-users/p2')


def test_eye_test_form_back(admin_client, backend):
    admin_client.post('/admin/past-users/p1/tests/new')
    admin_client.post('/admin/past-users/p1/tests/form', data=DISTANCE_NEAR)
    admin_client.post('/admin/past-users/p1/tests/form', data={'action': 'back'})
    with admin_client.session_transaction() as sess:
        assert sess['wizard:past_user_eye_test']['step'] == 'measurements'


def test_delete_eye_test(admin_client, backend):
    backend.on('DELETE', BASE + '/eye-tests/e1', None)
    response = admin_client.post('/admin/past-users/p1/tests/e1/delete')
    assert response.headers['Location'].endswith('/admin/past-users/p1')
    assert backend.called('DELETE', BASE + '/eye-tests/e1')
    assert 'Test Deleted' in flashed(admin_client)
