"""Scoring, suggestion, achievement and progression components"""
