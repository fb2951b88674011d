"""Clinic application for the iHealth backend.

Holds the models, serializers, views and route registrations for
patients, doctors, appointments and the pharmacy inventory.
"""
