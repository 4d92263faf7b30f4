"""
单词集与内容目录API端点测试
"""
from vocaman.core.config import settings
from vocaman.crud.crud_content import get_dataset_cards
from vocaman.crud.crud_content import term as crud_term
from vocaman.crud.crud_dataset import dataset as crud_dataset
from vocaman.models.homework import HomeworkAssignment

API = settings.API_V2_STR


def _create(client, headers, **overrides):
    payload = {"name": "Fruits", "sourceLanguageCode": "ko", "targetLanguageCode": "en"}
    payload.update(overrides)
    return client.post(f"{API}/datasets", json=payload, headers=headers)


def test_create_requires_parent_role(client, make_user, auth_headers):
    assert _create(client, auth_headers(make_user("student"))).status_code == 403

    response = _create(client, auth_headers(make_user("parent")))
    assert response.status_code == 201
    assert response.json()["data"]["datasetId"]


def test_list_and_get_dataset(client, make_user, make_dataset, auth_headers):
    owner = make_user("parent", nickname="Owner")
    dataset, _ = make_dataset(owner, [1, 2])
    headers = auth_headers(owner)

    listed = client.get(f"{API}/datasets", headers=headers).json()["data"]
    assert [d["datasetId"] for d in listed] == [str(dataset.id)]

    detail = client.get(f"{API}/datasets/{dataset.id}", headers=headers).json()["data"]
    assert detail["ownerNickname"] == "Owner"
    assert detail["conceptCount"] == 2
    assert detail["sourceLanguageCode"] == "ko"

    assert client.get(f"{API}/datasets/999999", headers=headers).status_code == 404


def test_update_dataset(client, db, make_user, make_dataset, auth_headers):
    owner = make_user("parent")
    dataset, _ = make_dataset(owner)
    url = f"{API}/datasets/{dataset.id}"

    assert client.put(url, json={}, headers=auth_headers(owner)).status_code == 400
    assert client.put(url, json={"name": "x"}, headers=auth_headers(make_user("parent"))).status_code == 403
    assert client.put(url, json={"name": "Renamed"}, headers=auth_headers(owner)).status_code == 200

    db.expire_all()
    assert crud_dataset.get(db, dataset.id).name == "Renamed"


def test_delete_dataset(client, db, make_user, make_dataset, auth_headers):
    owner = make_user("parent")
    dataset, _ = make_dataset(owner, [1, 1])
    dataset_id = dataset.id

    response = client.delete(f"{API}/datasets/{dataset_id}", headers=auth_headers(owner))
    assert response.status_code == 200
    db.expire_all()
    assert crud_dataset.get(db, dataset_id) is None
    assert crud_dataset.count_terms(db, dataset_id=dataset_id) == 0


def test_delete_dataset_used_by_homework(client, db, make_user, make_dataset, auth_headers):
    owner = make_user("parent")
    child = make_user("student")
    dataset, _ = make_dataset(owner)
    db.add(HomeworkAssignment(parent_user_id=owner.id, child_user_id=child.id, dataset_id=dataset.id))
    db.commit()

    response = client.delete(f"{API}/datasets/{dataset.id}", headers=auth_headers(owner))
    assert response.status_code == 409


def test_concept_membership(client, db, make_user, make_dataset, auth_headers):
    owner = make_user("parent")
    dataset, _ = make_dataset(owner, [1])
    other, _ = make_dataset(owner, [1], name="Other")
    concept_id = get_dataset_cards(db, dataset_id=other.id)[0].concept_id
    url = f"{API}/datasets/{dataset.id}/concepts"

    assert client.post(url, json={"conceptId": concept_id}, headers=auth_headers(owner)).status_code == 201
    assert client.post(url, json={"conceptId": concept_id}, headers=auth_headers(owner)).status_code == 409
    assert client.post(url, json={"conceptId": 987654}, headers=auth_headers(owner)).status_code == 404
    assert crud_dataset.count_terms(db, dataset_id=dataset.id) == 2

    assert client.delete(f"{url}/{concept_id}", headers=auth_headers(owner)).status_code == 200
    assert client.delete(f"{url}/{concept_id}", headers=auth_headers(owner)).status_code == 404


def test_add_custom_word_with_new_concept(client, db, make_user, make_dataset, auth_headers):
    owner = make_user("parent")
    dataset, _ = make_dataset(owner, [])
    payload = {
        "imageUrl": "https://cdn.example.com/apple.png",
        "terms": [
            {"languageCode": "en", "text": "apple", "hints": [
                {"hintType": "text", "hintContent": "red fruit", "languageCode": "en"},
            ]},
            {"languageCode": "ko", "text": "사과"},
        ],
    }

    response = client.post(f"{API}/datasets/{dataset.id}/terms", json=payload, headers=auth_headers(owner))

    assert response.status_code == 201
    concept_id = int(response.json()["data"]["conceptId"])
    assert crud_dataset.has_concept(db, dataset_id=dataset.id, concept_id=concept_id)
    assert crud_dataset.count_terms(db, dataset_id=dataset.id) == 2


def test_add_custom_word_validation(client, make_user, make_dataset, auth_headers):
    owner = make_user("parent")
    dataset, _ = make_dataset(owner, [])
    url = f"{API}/datasets/{dataset.id}/terms"
    term = {"languageCode": "en", "text": "pear"}

    neither = client.post(url, json={"terms": [term]}, headers=auth_headers(owner))
    both = client.post(url, json={"conceptId": 1, "imageUrl": "x.png", "terms": [term]}, headers=auth_headers(owner))
    empty = client.post(url, json={"imageUrl": "x.png", "terms": []}, headers=auth_headers(owner))

    assert neither.status_code == 400
    assert both.status_code == 400
    assert empty.status_code == 400


def test_concept_and_term_lookup(client, db, make_user, make_dataset):
    owner = make_user("parent")
    _, term_ids = make_dataset(owner, [1], with_hints=True)
    stored = crud_term.get(db, term_ids[0])

    term = client.get(f"{API}/terms/{term_ids[0]}").json()["data"]
    assert term["text"] == stored.text
    assert term["hints"][0]["hintContent"] == "hint 0-0"

    concept = client.get(f"{API}/concepts/{stored.concept_id}").json()["data"]
    assert concept["conceptId"] == str(stored.concept_id)

    assert client.get(f"{API}/terms/999999").status_code == 404
    assert client.get(f"{API}/concepts/999999").status_code == 404
