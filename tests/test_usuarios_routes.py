from auth.local.utils import decode_access_token, hash_password, verify_password
from utils.errors import StoreError

DUPLICATE_EMAIL = {
    "type": "UniqueViolationError",
    "message": 'duplicate key value violates unique constraint "usuarios_email_key"',
    "code": "23505",
    "constraint": "usuarios_email_key",
}


def stored_user(password="SenhaForte123!", **overrides):
    user = {
        "id": 7,
        "email": "joao.silva@empresa.com.br",
        "senha": hash_password(password, rounds=4),
        "funcionario_id": 15,
    }
    user.update(overrides)
    return user


def test_register_does_not_need_token(client, db):
    db.fetchrow.return_value = {"id": 7, "email": "joao.silva@empresa.com.br"}

    response = client.post(
        "/api/usuarios",
        json={"email": "joao.silva@empresa.com.br", "senha": "SenhaForte123!", "funcionario_id": 15},
    )

    assert response.status_code == 201
    assert response.json() == {"id": 7, "email": "joao.silva@empresa.com.br"}


def test_register_stores_hash_not_plaintext(client, db):
    db.fetchrow.return_value = {"id": 7, "email": "joao.silva@empresa.com.br"}

    client.post(
        "/api/usuarios",
        json={"email": "joao.silva@empresa.com.br", "senha": "SenhaForte123!", "funcionario_id": 15},
    )

    _, email, stored, funcionario_id = db.fetchrow.await_args.args
    assert email == "joao.silva@empresa.com.br"
    assert funcionario_id == 15
    assert stored != "SenhaForte123!"
    assert verify_password("SenhaForte123!", stored)


def test_register_requires_all_fields(client, db):
    bodies = [
        {"senha": "x", "funcionario_id": 1},
        {"email": "a@empresa.com.br", "funcionario_id": 1},
        {"email": "a@empresa.com.br", "senha": "x"},
        {"email": "a@empresa.com.br", "senha": "", "funcionario_id": 1},
    ]
    for body in bodies:
        response = client.post("/api/usuarios", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "Preencha todos os campos obrigatórios."}
    db.fetchrow.assert_not_awaited()


def test_register_rejects_malformed_email(client, db):
    response = client.post("/api/usuarios", json={"email": "not-an-email", "senha": "x", "funcionario_id": 1})
    assert response.status_code == 400
    db.fetchrow.assert_not_awaited()


def test_duplicate_email_fails_and_first_user_is_kept(client, db):
    body = {"email": "joao.silva@empresa.com.br", "senha": "SenhaForte123!", "funcionario_id": 15}
    db.fetchrow.side_effect = [
        {"id": 7, "email": "joao.silva@empresa.com.br"},
        StoreError("Erro no banco de dados.", details=DUPLICATE_EMAIL),
    ]

    first = client.post("/api/usuarios", json=body)
    second = client.post("/api/usuarios", json=body)

    assert first.status_code == 201
    assert second.status_code == 500
    assert second.json() == {"error": "Erro ao criar usuário.", "details": DUPLICATE_EMAIL}
    # Only INSERTs were issued; nothing touched the first row
    db.execute.assert_not_awaited()


def test_login_returns_token_for_the_user(client, db, settings):
    db.fetchrow.return_value = stored_user()

    response = client.post(
        "/api/usuarios/login", json={"email": "joao.silva@empresa.com.br", "senha": "SenhaForte123!"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["usuario"] == {"id": 7, "email": "joao.silva@empresa.com.br"}
    claims = decode_access_token(body["token"], settings.jwt_secret)
    assert claims["id"] == 7
    assert claims["funcionario_id"] == 15
    assert "senha" not in response.text


def test_login_token_opens_protected_routes(client, db):
    db.fetchrow.return_value = stored_user()
    token = client.post(
        "/api/usuarios/login", json={"email": "joao.silva@empresa.com.br", "senha": "SenhaForte123!"}
    ).json()["token"]
    db.fetch.return_value = []

    response = client.get("/api/usuarios", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


def test_login_wrong_password(client, db):
    db.fetchrow.return_value = stored_user()

    response = client.post(
        "/api/usuarios/login", json={"email": "joao.silva@empresa.com.br", "senha": "errada"}
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Senha inválida"}
    assert "token" not in response.json()


def test_login_unknown_email(client, db):
    db.fetchrow.return_value = None

    response = client.post("/api/usuarios/login", json={"email": "ninguem@empresa.com.br", "senha": "x"})

    assert response.status_code == 401
    assert response.json() == {"error": "Usuário não encontrado"}


def test_login_store_failure(client, db):
    db.fetchrow.side_effect = StoreError("Banco de dados indisponível.", details={"type": "OSError"})

    response = client.post("/api/usuarios/login", json={"email": "a@empresa.com.br", "senha": "x"})

    assert response.status_code == 500
    assert response.json()["error"] == "Erro ao realizar login."


def test_list_users_requires_token(client, db):
    assert client.get("/api/usuarios").status_code == 401
    db.fetch.assert_not_awaited()


def test_list_users_with_removed_funcionario(client, db, auth_headers):
    db.fetch.return_value = [
        {"id": 7, "email": "joao.silva@empresa.com.br", "funcionario": "João da Silva"},
        {"id": 8, "email": "orfao@empresa.com.br", "funcionario": None},
    ]

    response = client.get("/api/usuarios", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()[1] == {"id": 8, "email": "orfao@empresa.com.br", "funcionario": None}
    assert "LEFT JOIN funcionarios" in db.fetch.await_args.args[0]


def test_delete_user(client, db, auth_headers):
    db.execute.return_value = "DELETE 0"

    response = client.delete("/api/usuarios/123", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Usuário excluído com sucesso."}
    assert db.execute.await_args.args[1:] == (123,)


def test_delete_user_requires_token(client, db):
    assert client.delete("/api/usuarios/123").status_code == 401
    db.execute.assert_not_awaited()


def test_register_and_login_with_long_password(client, db):
    senha = "x" * 80
    db.fetchrow.return_value = {"id": 9, "email": "longa@empresa.com.br"}

    created = client.post(
        "/api/usuarios", json={"email": "longa@empresa.com.br", "senha": senha, "funcionario_id": 1}
    )
    assert created.status_code == 201
    stored = db.fetchrow.await_args.args[2]

    db.fetchrow.return_value = stored_user(id=9, email="longa@empresa.com.br", senha=stored)
    login = client.post("/api/usuarios/login", json={"email": "longa@empresa.com.br", "senha": senha})

    assert login.status_code == 200
    assert "token" in login.json()


def test_mixed_case_email_is_stored_as_typed_and_logs_in(client, db):
    email = "Ana@Empresa.COM"
    db.fetchrow.return_value = {"id": 11, "email": email}

    created = client.post("/api/usuarios", json={"email": email, "senha": "Senha123!", "funcionario_id": 1})

    assert created.status_code == 201
    _, stored_email, stored_hash, _ = db.fetchrow.await_args.args
    assert stored_email == email

    db.fetchrow.return_value = stored_user(id=11, email=stored_email, senha=stored_hash)
    login = client.post("/api/usuarios/login", json={"email": email, "senha": "Senha123!"})

    assert login.status_code == 200
    assert db.fetchrow.await_args.args[1] == email
    assert login.json()["usuario"] == {"id": 11, "email": email}
