# wsbilling/routes/auth.py
from __future__ import annotations

from flask import Blueprint, current_app, redirect, render_template, request, url_for

from wsbilling.services.accounts import authenticate, register_user
from wsbilling.utils_auth import login_user, logout_user

bp = Blueprint("auth", __name__)

LOGIN_ERROR = "Usuario o contraseña incorrectos"
PASSWORD_MISMATCH_ERROR = "Las contraseñas no coinciden"
USERNAME_TAKEN_ERROR = "Ese nombre de usuario ya existe"


@bp.get("/login")
def login():
    return render_template("pages/login.html")


@bp.post("/login")
def login_post():
    username = request.form.get("username") or ""
    password = request.form.get("password") or ""

    user = authenticate(username, password)
    if user is not None:
        login_user(user)
        return redirect(url_for("pages.index"))

    current_app.logger.info("Login fallido para username=%r", username)
    return render_template("pages/login.html", error=LOGIN_ERROR, username=username)


@bp.get("/register")
def register():
    return render_template("pages/register.html", errors={})


@bp.post("/register")
def register_post():
    username = request.form.get("username") or ""
    password = request.form.get("password") or ""
    password_repeat = request.form.get("password-repeat") or ""

    if password != password_repeat:
        return render_template(
            "pages/register.html",
            errors={"password": PASSWORD_MISMATCH_ERROR},
            username=username,
        ), 400

    if register_user(username, password) is not None:
        return redirect(url_for("auth.login"))

    return render_template(
        "pages/register.html",
        errors={"username": USERNAME_TAKEN_ERROR},
        username=username,
    ), 400


@bp.get("/logout")
def logout():
    logout_user()
    return redirect(url_for("auth.login"))
