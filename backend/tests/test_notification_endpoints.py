"""
通知API端点与通知写入任务测试
"""
from unittest.mock import patch

from kombu.exceptions import OperationalError

from vocaman.core.config import settings
from vocaman.crud.crud_notification import notification as crud_notification
from vocaman.services.notification_service import NotificationDispatcher
from vocaman.tasks.notification_tasks import create_notification_task

API = settings.API_V2_STR


def _seed(user_id, count):
    for index in range(count):
        create_notification_task.apply(args=[{
            "recipient_user_id": user_id,
            "type": "homework_assigned",
            "message": f"message {index}",
            "related_entity_type": "homework_assignment",
            "related_entity_id": index + 1,
        }])


def test_list_and_mark_read(client, make_user, auth_headers):
    user = make_user("student")
    _seed(user.id, 2)
    headers = auth_headers(user)

    response = client.get(f"{API}/notifications", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["unreadCount"] == 2
    assert [n["message"] for n in body["data"]] == ["message 1", "message 0"]

    notification_id = body["data"][0]["notificationId"]
    assert client.post(f"{API}/notifications/{notification_id}/read", headers=headers).status_code == 200

    body = client.get(f"{API}/notifications", headers=headers).json()
    assert body["unreadCount"] == 1


def test_mark_read_errors(client, make_user, auth_headers):
    owner = make_user("student")
    other = make_user("student")
    _seed(owner.id, 1)
    notification_id = client.get(f"{API}/notifications", headers=auth_headers(owner)).json()["data"][0]["notificationId"]

    assert client.post(f"{API}/notifications/{notification_id}/read", headers=auth_headers(other)).status_code == 403
    assert client.post(f"{API}/notifications/999999/read", headers=auth_headers(owner)).status_code == 404


def test_homework_assignment_notifies_child(client, db, make_user, make_relation, make_dataset, auth_headers):
    parent = make_user("parent")
    child = make_user("student")
    make_relation(parent, child)
    dataset, _ = make_dataset(parent)

    client.post(
        f"{API}/homework/assignments",
        json={"childUserId": child.id, "datasetId": dataset.id, "reward": 1},
        headers=auth_headers(parent),
    )

    notifications = crud_notification.list_for_user(db, user_id=child.id)
    assert [n.type for n in notifications] == ["homework_assigned"]
    assert notifications[0].related_entity_type == "homework_assignment"


def test_dispatch_failure_is_logged_not_raised(caplog):
    dispatcher = NotificationDispatcher()
    with patch("vocaman.services.notification_service.create_notification_task") as task:
        task.apply_async.side_effect = OperationalError("broker down")
        dispatcher.dispatch(recipient_user_id=1, type="homework_assigned", message="hi")
    assert "Failed to enqueue" in caplog.text
