"""HTTP surface: cookies, redirects and error pages."""

COOKIE = "memberauth_session"
ADMIN_EMAIL = "root@example.com"
ADMIN_PASSWORD = "rootpass1"


def _signup(client, name="Alice", email="alice@x.com", password="secret1"):
    return client.post(
        "/signup",
        data={"name": name, "email": email, "password": password},
        follow_redirects=False,
    )


def _login(client, email, password):
    return client.post(
        "/login", data={"email": email, "password": password}, follow_redirects=False
    )


def test_health(client):
    assert client.get("/api/health").json() == {"ok": True}


def test_home_anonymous_offers_signup_and_login(client):
    res = client.get("/")
    assert res.status_code == 200
    assert "Please sign up or log in to continue." in res.text
    assert 'href="/signup"' in res.text


def test_signup_sets_cookie_and_redirects_to_members(client):
    res = _signup(client)
    assert res.status_code == 303
    assert res.headers["location"] == "/members"
    set_cookie = res.headers["set-cookie"]
    assert set_cookie.startswith(f"{COOKIE}=")
    assert "httponly" in set_cookie.lower()
    assert "Max-Age=3600" in set_cookie

    members = client.get("/members")
    assert members.status_code == 200
    assert "Hello, Alice." in members.text
    assert "/static/img/cat" in members.text


def test_cookie_holds_only_the_opaque_token(client):
    _signup(client)
    token = client.cookies.get(COOKIE)
    assert token
    assert "alice" not in token.lower()


def test_signup_duplicate_email(client):
    _signup(client)
    client.cookies.clear()
    res = _signup(client, name="Impostor")
    assert res.status_code == 400
    assert "Email already exists" in res.text
    assert COOKIE not in res.headers.get("set-cookie", "")


def test_signup_validation_error(client):
    res = _signup(client, email="nope")
    assert res.status_code == 400
    assert "not a valid email" in res.text


def test_signup_missing_fields_is_400_not_422(client):
    res = client.post("/signup", data={}, follow_redirects=False)
    assert res.status_code == 400


def test_login_failures_render_the_same_surface(client):
    _signup(client)
    client.cookies.clear()

    wrong_password = _login(client, "alice@x.com", "wrong-password")
    unknown_email = _login(client, "nobody@x.com", "wrong-password")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert "Invalid email/password combination" in wrong_password.text
    assert wrong_password.text == unknown_email.text
    assert "set-cookie" not in wrong_password.headers


def test_login_success_redirects_home(client):
    _signup(client)
    client.cookies.clear()
    res = _login(client, "alice@x.com", "secret1")
    assert res.status_code == 303
    assert res.headers["location"] == "/"
    home = client.get("/")
    assert "Welcome, Alice!" in home.text


def test_login_replaces_previous_session(client):
    _signup(client)
    old_token = client.cookies.get(COOKIE)
    _login(client, "alice@x.com", "secret1")
    new_token = client.cookies.get(COOKIE)
    assert new_token != old_token

    ctx = client.app.state.memberauth
    assert ctx.auth.get_session(old_token) is None
    assert ctx.auth.get_session(new_token) is not None


def test_members_requires_session(client):
    res = client.get("/members", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/"


def test_bogus_cookie_is_treated_as_anonymous(client):
    client.cookies.set(COOKIE, "forged-token")
    res = client.get("/members", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/"


def test_logout_destroys_session(client):
    _signup(client)
    token = client.cookies.get(COOKIE)

    res = client.get("/logout", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/"
    assert client.app.state.memberauth.auth.get_session(token) is None

    # replaying the old token does not work
    client.cookies.set(COOKIE, token)
    assert client.get("/members", follow_redirects=False).status_code == 303


def test_logout_without_session_is_fine(client):
    res = client.get("/logout", follow_redirects=False)
    assert res.status_code == 303


def test_admin_forbidden_for_user_role(client):
    _signup(client)
    res = client.get("/admin", follow_redirects=False)
    assert res.status_code == 403
    assert "Forbidden" in res.text


def test_admin_redirects_anonymous(client):
    res = client.get("/admin", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/"


def test_promote_by_non_admin_is_forbidden(client):
    _signup(client)
    res = client.post("/promote", data={"email": "alice@x.com"}, follow_redirects=False)
    assert res.status_code == 403
    record = client.app.state.memberauth.users.find_by_email("alice@x.com")
    assert record.role == "user"


def test_seeded_admin_can_promote_and_demote(client):
    _signup(client, name="Bob", email="bob@x.com", password="bobpass1")
    bob_token = client.cookies.get(COOKIE)
    client.cookies.clear()

    _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    page = client.get("/admin")
    assert page.status_code == 200
    assert "bob@x.com" in page.text
    assert "password_hash" not in page.text

    res = client.post("/promote", data={"email": "bob@x.com"}, follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "/admin"

    ctx = client.app.state.memberauth
    assert ctx.users.find_by_email("bob@x.com").role == "admin"
    # Bob's existing session keeps its snapshot
    assert ctx.auth.get_session(bob_token).user.role == "user"

    res = client.post("/demote", data={"email": "bob@x.com"}, follow_redirects=False)
    assert res.status_code == 303
    assert ctx.users.find_by_email("bob@x.com").role == "user"


def test_promote_unknown_target_is_404(client):
    _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    res = client.post("/promote", data={"email": "ghost@x.com"}, follow_redirects=False)
    assert res.status_code == 404


def test_promote_malformed_email_is_400(client):
    _login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
    res = client.post("/promote", data={"email": "ghost"}, follow_redirects=False)
    assert res.status_code == 400


def test_unknown_page_is_404(client):
    res = client.get("/does-not-exist")
    assert res.status_code == 404
    assert "Page not found - 404" in res.text


def test_storage_failure_is_generic_500(client):
    ctx = client.app.state.memberauth
    (ctx.data_dir / "users.json").write_text("{broken", encoding="utf-8")
    res = _signup(client)
    assert res.status_code == 500
    assert "Something went wrong" in res.text
    assert "users.json" not in res.text


def test_signup_replaces_session_carried_by_request(client):
    _signup(client)
    old_token = client.cookies.get(COOKIE)

    _signup(client, name="Bob", email="bob@x.com", password="bobpass1")
    new_token = client.cookies.get(COOKIE)

    ctx = client.app.state.memberauth
    assert new_token != old_token
    assert ctx.auth.get_session(old_token) is None
    assert ctx.auth.get_session(new_token).user.email == "bob@x.com"
