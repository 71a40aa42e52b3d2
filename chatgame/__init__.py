"""Serveur de contrôle d'expérience: chat modéré, timer partagé et télémétrie."""
