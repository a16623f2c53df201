from .animal import Animal, AnimalStatus, SexSpayNeuterStatus, LifeStage, FosterVisibility
from .animal_group import AnimalGroup
