"""
tests.test_chat_room
~~~~~~~~~~~~~~~~~~~~

ChatRoom 领域模型单元测试：容量约束、双向成员同步、清空回调、ID 校验。
"""
from __future__ import annotations

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from roomchat.core.exceptions import MembershipInconsistencyError
from roomchat.schemas.chat_room import RoomState
from roomchat.services.chat_room import ChatRoom
from roomchat.services.user import User


class TestChatRoomId:
    """测试房间 ID 的签发与校验。"""

    def test_new_ids_are_valid_and_unique(self) -> None:
        ids = {ChatRoom.new_id() for _ in range(50)}

        assert len(ids) == 50
        assert all(ChatRoom.is_id_for_chat_room(room_id) for room_id in ids)

    @pytest.mark.parametrize(
        "value",
        [None, 42, "", "room-1", "chatroom-", "chatroom-" + "g" * 32, "chatroom-" + "a" * 31, " chatroom-" + "a" * 32],
    )
    def test_rejects_forged_ids(self, value: object) -> None:
        assert ChatRoom.is_id_for_chat_room(value) is False

    @pytest.mark.parametrize("capacity", [0, -1, True, 1.5, "2"])
    def test_constructor_rejects_invalid_capacity(self, capacity: object) -> None:
        with pytest.raises(ValueError):
            ChatRoom.create(capacity)  # type: ignore[arg-type]


class TestChatRoomMembership:
    """测试成员的加入与移除。"""

    def test_add_user_updates_both_sides(self, user: User) -> None:
        room = ChatRoom.create(2)

        assert room.add_user(user) is True
        assert room.has_member(user.id)
        assert user.is_in_chat_room(room.id)
        user.session.join.assert_called_once_with(room.id)

    def test_add_existing_member_is_noop(self, user: User) -> None:
        room = ChatRoom.create(2)
        room.add_user(user)

        assert room.add_user(user) is True
        assert room.member_count == 1
        user.session.join.assert_called_once()

    def test_add_user_to_full_room_fails(self, make_user: Callable[[], User]) -> None:
        """满员后再加入返回 False，成员数不超过容量。"""
        room = ChatRoom.create(2)
        users = [make_user() for _ in range(3)]

        results = [room.add_user(u) for u in users]

        assert results == [True, True, False]
        assert room.member_count == room.capacity
        assert users[2].room_id is None

    def test_member_count_never_exceeds_capacity(self, make_user: Callable[[], User]) -> None:
        room = ChatRoom.create(3)
        users = [make_user() for _ in range(6)]
        for i, u in enumerate(users):
            room.add_user(u)
            if i % 2:
                room.remove_user(users[i - 1])
            assert room.member_count <= room.capacity

    def test_state_transitions(self, make_user: Callable[[], User]) -> None:
        """EMPTY → PARTIAL → FULL，移除成员后回到 PARTIAL / EMPTY。"""
        room = ChatRoom.create(2)
        a, b = make_user(), make_user()

        assert room.state is RoomState.EMPTY
        room.add_user(a)
        assert room.state is RoomState.PARTIAL
        assert room.remaining_capacity == 1
        room.add_user(b)
        assert room.state is RoomState.FULL
        assert room.is_full
        room.remove_user(a)
        assert room.state is RoomState.PARTIAL
        room.remove_user(b)
        assert room.state is RoomState.EMPTY

    def test_capacity_one_goes_straight_to_full(self, user: User) -> None:
        room = ChatRoom.create(1)
        room.add_user(user)

        assert room.state is RoomState.FULL

    def test_remove_user_clears_user_reference(self, user: User) -> None:
        room = ChatRoom.create(2)
        room.add_user(user)

        assert room.remove_user(user) is True
        assert not room.has_member(user.id)
        assert user.room_id is None
        user.session.leave.assert_called_once_with(room.id)

    def test_remove_non_member_is_noop(self, user: User) -> None:
        """移除从未加入的用户是空操作。"""
        room = ChatRoom.create(2)

        assert room.remove_user(user) is False
        user.session.leave.assert_not_called()

    def test_remove_twice_is_noop(self, user: User) -> None:
        room = ChatRoom.create(2)
        room.add_user(user)
        room.remove_user(user)

        assert room.remove_user(user) is False

    def test_remove_member_recorded_elsewhere_raises(self, user: User) -> None:
        """成员记录的房间与本房间不符属于内部状态不一致。"""
        room = ChatRoom.create(2)
        room.add_user(user)
        user.join_chat_room(ChatRoom.new_id())

        with pytest.raises(MembershipInconsistencyError):
            room.remove_user(user)
        assert not room.has_member(user.id)

    def test_add_user_still_in_other_room_raises(self, user: User) -> None:
        """用户仍是其他房间成员时不能直接加入，两边的成员记录都保持不变。"""
        first = ChatRoom.create(2)
        first.add_user(user)
        second = ChatRoom.create(2)

        with pytest.raises(MembershipInconsistencyError):
            second.add_user(user)

        assert first.has_member(user.id)
        assert user.is_in_chat_room(first.id)
        assert second.is_empty
        user.session.join.assert_called_once_with(first.id)

    def test_add_user_after_leaving_other_room(self, user: User) -> None:
        first = ChatRoom.create(2)
        first.add_user(user)
        first.remove_user(user)
        second = ChatRoom.create(2)

        assert second.add_user(user) is True
        assert not first.has_member(user.id)
        assert user.is_in_chat_room(second.id)

    def test_add_raises_when_user_rejects_issued_id(self) -> None:
        room = ChatRoom.create(2)
        stubborn = MagicMock(spec=User)
        stubborn.id = "stubborn"
        stubborn.join_chat_room.return_value = False
        stubborn.is_in_chat_room.return_value = False

        with pytest.raises(MembershipInconsistencyError):
            room.add_user(stubborn)
        assert room.is_empty


class TestChatRoomOnEmpty:
    """测试成员清空时的回收回调。"""

    def test_on_empty_called_once_when_last_member_leaves(self, make_user: Callable[[], User]) -> None:
        on_empty = MagicMock()
        room = ChatRoom.create(2, on_empty=on_empty)
        a, b = make_user(), make_user()
        room.add_user(a)
        room.add_user(b)

        room.remove_user(a)
        on_empty.assert_not_called()

        room.remove_user(b)
        on_empty.assert_called_once_with(room)

        room.remove_user(b)
        on_empty.assert_called_once()

    def test_info(self, user: User) -> None:
        room = ChatRoom.create(4)
        room.add_user(user)

        info = room.info()

        assert info.room_id == room.id
        assert info.capacity == 4
        assert info.member_count == 1
        assert info.state is RoomState.PARTIAL
        assert info.created_at == room.created_at
