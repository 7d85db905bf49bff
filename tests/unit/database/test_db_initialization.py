from flask import Flask


def test_initialize_database_creates_sqlite_directory(tmp_path):
    # Arrange a non-existent subdirectory for the DB file
    target_dir = tmp_path / "nested" / "dbdir"
    db_file = target_dir / "test.db"
    uri = f"sqlite:///{db_file}".replace("\\", "/")

    from melodix.database.db_manager import DeviceUser, Playlist, Song, db, initialize_database

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.instance_path = str(tmp_path / "instance")

    initialize_database(app)

    assert target_dir.exists()
    with app.app_context():
        assert db.session.query(Song).count() == 0
        assert db.session.query(Playlist).count() == 0
        assert db.session.query(DeviceUser).count() == 0
