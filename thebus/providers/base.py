from abc import ABC, abstractmethod

from thebus.domain import ArrivalFeed, StopIdentifier


class ArrivalsProvider(ABC):
    @abstractmethod
    def fetch_arrivals(self, stop: StopIdentifier) -> ArrivalFeed:
        ...
