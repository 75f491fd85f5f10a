"""Messages exchanged by the user and friend example services."""

from __future__ import annotations

from enum import IntEnum

from .wire import Field, Message

_STRING = "string"
_INT32 = "int32"
_UINT32 = "uint32"
_BOOL = "bool"
_MESSAGE = "message"
_ENUM = "enum"


class ResultCode(Message):
    """Outcome of a call: an error code and message."""

    errcode = Field(1, _INT32)
    errmsg = Field(2, _STRING)


class LoginRequest(Message):
    name = Field(1, _STRING)
    pwd = Field(2, _STRING)


class LoginResponse(Message):
    result = Field(1, _MESSAGE, target=ResultCode)
    success = Field(2, _BOOL)


class RegisterRequest(Message):
    id = Field(1, _UINT32)
    name = Field(2, _STRING)
    pwd = Field(3, _STRING)


class RegisterResponse(Message):
    result = Field(1, _MESSAGE, target=ResultCode)
    success = Field(2, _BOOL)


class GetFriendsListRequest(Message):
    userid = Field(1, _UINT32)


class GetFriendsListResponse(Message):
    result = Field(1, _MESSAGE, target=ResultCode)
    friends = Field(2, _STRING, repeated=True)


class Sex(IntEnum):
    MAN = 0
    WOMAN = 1


class User(Message):
    name = Field(1, _STRING)
    age = Field(2, _UINT32)
    sex = Field(3, _ENUM, target=Sex)


class GetFriendListsResponse(Message):
    result = Field(1, _MESSAGE, target=ResultCode)
    friend_list = Field(2, _MESSAGE, repeated=True, target=User)