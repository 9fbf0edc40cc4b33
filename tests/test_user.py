"""Tests for User and its privately owned services."""

from __future__ import annotations

import pytest

from contextacl import Service, TypeMismatchError, UnknownServiceError, User


class TestUserIdentity:
    """Tests for id and label handling."""

    def test_constructor(self) -> None:
        """Test constructing a user with id and label."""
        user = User("foo", "bar")
        assert user.id == "foo"
        assert user.label == "bar"

    def test_constructor_with_default_label(self) -> None:
        """Test the label defaults to None."""
        user = User("foo")
        assert user.id == "foo"
        assert user.label is None

    def test_set_label_returns_previous(self) -> None:
        """Test set_label returns the previous label."""
        user = User("foo", "bar")
        assert user.set_label("baz") == "bar"
        assert user.label == "baz"

    def test_id_is_read_only(self) -> None:
        """Test the id cannot be reassigned."""
        user = User("foo")
        with pytest.raises(AttributeError):
            user.id = "bar"  # type: ignore[misc]


class TestUserServices:
    """Tests for add/delete/exists/get on owned services."""

    def test_add_services(self) -> None:
        """Test adding services returns the user and stores them by id."""
        services = [Service("s1"), Service("s2"), Service("s3")]
        user = User("foo")

        result = user.add_services(services)

        assert result is user
        assert len(user.get_services()) == 3
        for service in services:
            assert user.service_exists(service.id)
            assert user.get_service(service.id) is service

    def test_add_services_is_idempotent(self) -> None:
        """Adding the same service twice keeps a single entry."""
        user = User("foo")
        service = Service("s1")
        user.add_services([service]).add_services([service])
        assert len(user.get_services()) == 1

    def test_add_services_not_a_service(self) -> None:
        """Test add_services rejects non-Service items."""
        user = User("foo")
        with pytest.raises(TypeMismatchError) as exc_info:
            user.add_services([None])  # type: ignore[list-item]
        assert exc_info.value.details["operation"] == "User.add_services"
        assert exc_info.value.details["expected"] == "Service"

    def test_add_services_keeps_prior_progress(self) -> None:
        """Elements before the bad one stay applied."""
        user = User("foo")
        with pytest.raises(TypeMismatchError):
            user.add_services([Service("s1"), "s2", Service("s3")])  # type: ignore[list-item]
        assert user.service_exists("s1")
        assert not user.service_exists("s3")

    def test_delete_services(self) -> None:
        """Test deleting services returns the user and keeps the others."""
        services = [Service("s1"), Service("s2"), Service("s3")]
        user = User("foo").add_services(services)

        result = user.delete_services([services[0], services[2]])

        assert result is user
        assert not user.service_exists("s1")
        assert user.service_exists("s2")
        assert not user.service_exists("s3")
        assert user.get_service("s2") is services[1]

    def test_delete_absent_service_is_noop(self) -> None:
        """Test deleting a service the user does not own is a no-op."""
        user = User("foo").add_services([Service("s1")])
        user.delete_services([Service("s2")])
        assert list(user.get_services()) == ["s1"]

    def test_delete_services_not_a_service(self) -> None:
        """Test delete_services rejects non-Service items."""
        user = User("foo")
        with pytest.raises(TypeMismatchError) as exc_info:
            user.delete_services(["s1"])  # type: ignore[list-item]
        assert exc_info.value.details["operation"] == "User.delete_services"

    def test_service_exists_accepts_instance(self) -> None:
        """Test service_exists accepts a Service instance."""
        service = Service("s1")
        user = User("foo").add_services([service])
        assert user.service_exists(service)
        assert user.service_exists("s1")

    def test_service_does_not_exist(self) -> None:
        """Test service_exists for an unknown id."""
        assert not User("foo").service_exists("s1")

    def test_get_undefined_service(self) -> None:
        """Test looking up an unknown service raises UnknownServiceError."""
        with pytest.raises(UnknownServiceError):
            User("foo").get_service("s1")

    def test_get_services_snapshot_is_read_only(self) -> None:
        """Test the services snapshot cannot be mutated."""
        services = [Service("s1"), Service("s2")]
        user = User("foo").add_services(services)

        snapshot = user.get_services()

        assert dict(snapshot) == {"s1": services[0], "s2": services[1]}
        with pytest.raises(TypeError):
            snapshot["s3"] = Service("s3")  # type: ignore[index]

    def test_snapshot_does_not_follow_later_changes(self) -> None:
        """Test a snapshot does not see later changes."""
        user = User("foo").add_services([Service("s1")])
        snapshot = user.get_services()
        user.add_services([Service("s2")])
        assert list(snapshot) == ["s1"]
