"""
UI Models package for the grouped picklist.
Contains the Qt Model/View projections of the picklist engine.
"""

from .picklist_models import AvailableGroupsModel, ChosenGroupsModel, PicklistNode, PicklistTreeModel

__all__ = ['AvailableGroupsModel', 'ChosenGroupsModel', 'PicklistNode', 'PicklistTreeModel']
