import uuid

import pytest

from clinic.models import ChatMessage, Conversation
from clinic.services.chat import chat_group_name

pytestmark = pytest.mark.django_db


def start(client, **body):
    return client.post('/api/v1/chats/conversations/start', body, format='json')


@pytest.fixture
def conversation(client_for, patient, doctor):
    r = start(client_for(patient), OtherUserId='d1', Topic='Medication')
    assert r.status_code == 201
    return r.data['Data']['Conversation']


def test_start_conversation_between_two_users(conversation):
    assert conversation['InitiatingUserId'] == 'u1'
    assert conversation['OtherUserId'] == 'd1'
    assert conversation['IsGroupConversation'] is False
    assert sorted(u['id'] for u in conversation['Users']) == ['d1', 'u1']


def test_starting_again_returns_existing_conversation(client_for, conversation, doctor):
    r = start(client_for(doctor), OtherUserId='u1')
    assert r.data['Data']['Conversation']['id'] == conversation['id']
    assert Conversation.objects.count() == 1


def test_one_to_one_needs_other_user(client_for, patient):
    r = start(client_for(patient), Topic='Hello')
    assert r.status_code == 400
    assert 'OtherUserId' in r.data['Data']['Errors']


def test_group_conversation(client_for, doctor, patient, other_patient):
    r = start(client_for(doctor), IsGroupConversation=True, Users=['u1', 'u2'], Topic='Support group')
    assert r.status_code == 201
    users = r.data['Data']['Conversation']['Users']
    assert sorted(u['id'] for u in users) == ['d1', 'u1', 'u2']


def test_send_and_list_messages(client_for, conversation, patient, doctor):
    url = f"/api/v1/chats/conversations/{conversation['id']}/messages"
    r = client_for(patient).post(url, {'Message': 'Can I take it after food?'}, format='json')
    assert r.status_code == 201
    assert r.data['Data']['ChatMessage']['SenderId'] == 'u1'
    client_for(doctor).post(url, {'Message': 'Yes.'}, format='json')

    r = client_for(doctor).get(url)
    assert [m['Message'] for m in r.data['Data']['ChatMessages']] == ['Can I take it after food?', 'Yes.']
    assert Conversation.objects.get().last_message_timestamp is not None


def test_markup_only_message_is_rejected(client_for, conversation, patient):
    url = f"/api/v1/chats/conversations/{conversation['id']}/messages"
    r = client_for(patient).post(url, {'Message': '<script></script>'}, format='json')
    assert r.status_code == 400
    assert not ChatMessage.objects.exists()


def test_outsider_cannot_read_conversation(client_for, conversation, other_patient, admin_user):
    url = f"/api/v1/chats/conversations/{conversation['id']}"
    assert client_for(other_patient).get(url).status_code == 403
    assert client_for(admin_user).get(url).status_code == 200


def test_unknown_conversation(client_for, patient):
    r = client_for(patient).get(f"/api/v1/chats/conversations/{uuid.uuid4()}")
    assert r.status_code == 404
    assert client_for(patient).get('/api/v1/chats/conversations/abc').status_code == 400


def test_update_and_delete_conversation(client_for, conversation, patient):
    url = f"/api/v1/chats/conversations/{conversation['id']}"
    r = client_for(patient).put(url, {'Marked': True}, format='json')
    assert r.status_code == 200
    assert r.data['Data']['Conversation']['Marked'] is True
    assert r.data['Data']['Conversation']['Topic'] == 'Medication'
    assert client_for(patient).delete(url).status_code == 200
    assert not Conversation.objects.exists()


def test_search_user_conversations(client_for, conversation, patient, other_patient, doctor):
    start(client_for(doctor), OtherUserId='u2', Topic='Diet')
    r = client_for(patient).get('/api/v1/chats/users/u1/conversations')
    assert r.data['Data']['Conversations']['TotalCount'] == 1
    r = client_for(doctor).get('/api/v1/chats/users/d1/conversations', {'topic': 'Diet'})
    assert [c['Topic'] for c in r.data['Data']['Conversations']['Items']] == ['Diet']
    assert client_for(patient).get('/api/v1/chats/users/u2/conversations').status_code == 403


def test_only_sender_edits_message(client_for, conversation, patient, doctor):
    url = f"/api/v1/chats/conversations/{conversation['id']}/messages"
    message = client_for(patient).post(url, {'Message': 'Hello'}, format='json').data['Data']['ChatMessage']
    message_url = f"/api/v1/chats/messages/{message['id']}"

    assert client_for(doctor).get(message_url).status_code == 200
    assert client_for(doctor).put(message_url, {'Message': 'Edited'}, format='json').status_code == 403

    r = client_for(patient).put(message_url, {'Message': 'Hello doctor'}, format='json')
    assert r.data['Data']['ChatMessage']['Message'] == 'Hello doctor'
    assert client_for(patient).delete(message_url).status_code == 200
    assert client_for(patient).get(message_url).status_code == 404


def test_group_name():
    assert chat_group_name('abc') == 'chat.abc'
