from .accounts import Accounts
from .collections import Collections
from .deployments import DeploymentPredictions, Deployments
from .files import Files
from .hardware import Hardware
from .models import Models, ModelVersions
from .predictions import Predictions
from .trainings import Trainings
from .webhooks import Webhooks
