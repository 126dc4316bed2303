from academy.models import Admin


def test_admin_password_is_hashed_and_verifies(db):
    admin = Admin(username="ops", name="Ops")
    admin.set_password("s3cret-pass")
    db.session.add(admin)
    db.session.commit()

    stored = Admin.query.filter_by(username="ops").one()
    assert stored.password_hash != "s3cret-pass"
    assert stored.check_password("s3cret-pass")
    assert not stored.check_password("wrong")
