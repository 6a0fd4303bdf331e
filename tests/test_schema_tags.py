from drf_spectacular.generators import SchemaGenerator


def test_schema_tag_grouping(db):
    generator = SchemaGenerator()
    schema = generator.get_schema(request=None, public=True)
    paths = schema["paths"]
    expected = {
        "/api/v1/auth/jwt/create/": ["JWT Authentication"],
        "/api/v1/users/": ["Users"],
        "/api/v1/conversations/": ["Messaging"],
        "/api/v1/messages/search/": ["Messaging"],
        "/api/v1/notifications/": ["Notifications"],
        "/api/v1/followers/{user_id}/": ["Follows"],
    }
    for path, tags in expected.items():
        assert path in paths, path
        first_op = next(iter(paths[path].values()))
        assert first_op.get("tags") == tags, path

    declared = [t["name"] for t in schema["tags"]]
    assert len(declared) == len(set(declared))
