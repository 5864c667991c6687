"""Public package exports for the pseudo-top reconstruction framework."""
__author__ = "Renato Quagliani <rquaglia@cern.ch>"


from .classify import FinalStateSelection, classify_final_states, find_b_hadrons, is_from_hadron
from .clustering import ClusterInput, ClusteredJet, FastJetClusterer, JetClusterer
from .dressing import DressingResult, LeptonDresser
from .jets import JetBuilder
from .models import (
    DressedLepton,
    EventInput,
    GenParticle,
    LorentzVector,
    PseudoParticle,
    PseudoTopConfig,
    PseudoTopResult,
    TaggedJet,
)
from .pid import is_b_hadron, is_b_hadron_code
from .producer import PseudoTopProducer
from .topology import DecayTree, TopologyReconstructor, minimize_mass_residual

__all__ = [
    "PseudoTopProducer",
    "PseudoTopConfig",
    "PseudoTopResult",
    "EventInput",
    "GenParticle",
    "LorentzVector",
    "DressedLepton",
    "TaggedJet",
    "PseudoParticle",
    "FinalStateSelection",
    "classify_final_states",
    "find_b_hadrons",
    "is_from_hadron",
    "is_b_hadron",
    "is_b_hadron_code",
    "ClusterInput",
    "ClusteredJet",
    "JetClusterer",
    "FastJetClusterer",
    "LeptonDresser",
    "DressingResult",
    "JetBuilder",
    "TopologyReconstructor",
    "DecayTree",
    "minimize_mass_residual",
]
