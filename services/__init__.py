from flask import current_app


def get_storage():
    return current_app.extensions["storage"]


def get_notifier():
    return current_app.extensions["notifier"]


def get_document_generator():
    return current_app.extensions["document_generator"]
