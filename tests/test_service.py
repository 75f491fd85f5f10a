import pytest

from mprpc.controller import RpcController
from mprpc.messages import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from mprpc.service import MethodDescriptor, Service, rpc_method


class UserServiceRpc(Service):
    service_name = "UserServiceRpc"

    @rpc_method("Login", LoginRequest, LoginResponse)
    def login(self, controller, request, response, done):
        controller.set_failed("Method Login() not implemented.")
        if done is not None:
            done()

    @rpc_method("Register", RegisterRequest, RegisterResponse)
    def register(self, controller, request, response, done):
        controller.set_failed("Method Register() not implemented.")
        if done is not None:
            done()


class UserImpl(UserServiceRpc):
    def login(self, controller, request, response, done):
        response.success = request.name == "zhang san"
        done()


class Plain(Service):
    @rpc_method("Ping", LoginRequest, LoginResponse)
    def ping(self, controller, request, response, done):
        response.result.errmsg = request.name
        done()


LOGIN = MethodDescriptor("Login", "UserServiceRpc", LoginRequest, LoginResponse, "login", 0)
REGISTER = MethodDescriptor(
    "Register", "UserServiceRpc", RegisterRequest, RegisterResponse, "register", 1
)


def test_descriptors_in_declaration_order():
    assert list(UserServiceRpc.descriptors()) == [
        MethodDescriptor("Login", "UserServiceRpc", LoginRequest, LoginResponse, "login", 0),
        MethodDescriptor(
            "Register", "UserServiceRpc", RegisterRequest, RegisterResponse, "register", 1
        ),
    ]


def test_descriptor_fields():
    login = MethodDescriptor("Login", "UserServiceRpc", LoginRequest, LoginResponse, "login", 0)
    assert login.full_name == "UserServiceRpc.Login"
    assert UserServiceRpc.descriptors()[0] == login
    assert UserServiceRpc.descriptors()[0].request_type is LoginRequest
    assert UserServiceRpc.descriptors()[0].response_type is LoginResponse


def test_service_name_inherited():
    assert UserImpl.service_name == "UserServiceRpc"
    assert list(UserImpl.descriptors()) == [LOGIN, REGISTER]


def test_service_name_defaults_to_class_name():
    assert Plain.service_name == "Plain"
    assert Plain.descriptors()[0] == MethodDescriptor(
        "Ping", "Plain", LoginRequest, LoginResponse, "ping", 0
    )


def test_call_method_dispatches_to_override():
    calls = []
    service = UserImpl()
    response = LoginResponse()
    service.call_method(
        UserImpl.descriptors()[0],
        RpcController(),
        LoginRequest(name="zhang san"),
        response,
        lambda: calls.append("done"),
    )
    assert response.success is True
    assert calls == ["done"]


def test_call_method_base_implementation():
    controller = RpcController()
    UserImpl().call_method(
        UserImpl.descriptors()[1], controller, RegisterRequest(), RegisterResponse(), None
    )
    assert controller.failed is True
    assert "Register" in controller.error_text


def test_call_method_rejects_foreign_method():
    with pytest.raises(ValueError):
        UserImpl().call_method(
            Plain.descriptors()[0], RpcController(), LoginRequest(), LoginResponse(), None
        )


def test_rpc_method_requires_message_types():
    with pytest.raises(TypeError):
        rpc_method("Bad", dict, LoginResponse)


def test_duplicate_method_names_rejected():
    with pytest.raises(TypeError):

        class Twice(Service):
            @rpc_method("Same", LoginRequest, LoginResponse)
            def first(self, controller, request, response, done):
                done()

            @rpc_method("Same", LoginRequest, LoginResponse)
            def second(self, controller, request, response, done):
                done()


def test_descriptor_is_comparable():
    made = MethodDescriptor("Ping", "Plain", LoginRequest, LoginResponse, "ping", 0)
    assert made == Plain.descriptors()[0]