# -*- coding: utf-8 -*-
"""
provider for dielectric functions of selected materials.
"""
# %%
import warnings
import pathlib

import torch

from pymiesphere.helper import interp1d
from pymiesphere.special import DTYPE_FLOAT, DTYPE_COMPLEX


# photon energy (eV) <--> wavelength (nm)
HC_EV_NM = 1239.84193


# --- internal helpers
def _load_tabulated(dat_str):
    rows = dat_str["data"].split("\n")
    splitrows = [c.split() for c in rows]
    wl = []
    eps = []
    for s in splitrows:
        if len(s) > 0:
            wl.append(1000.0 * float(s[0]))  # microns --> nm
            _n = float(s[1])
            if len(s) > 2:
                _k = float(s[2])
            else:
                _k = 0.0
            eps.append((_n + 1j * _k) ** 2)
    return wl, eps


def _load_formula(dat_str):
    model_type = int((dat_str["type"].split())[1])
    coeff = [float(s) for s in dat_str["coefficients"].split()]
    for k in ["wavelength_range", "range"]:
        if k in dat_str:
            break
    # validity range (convert to nm)
    wl_range = [1e3 * float(dat_str[k].split()[0]), 1e3 * float(dat_str[k].split()[1])]

    return model_type, wl_range, coeff


def _as_wavelength(wavelength, device):
    wavelength = torch.as_tensor(wavelength, dtype=DTYPE_FLOAT, device=device)
    return torch.atleast_1d(wavelength.squeeze())


# --- material defining base class
class MaterialBase:
    """base class for material permittivity"""

    __name__ = "material dielectric constant base class"

    def __init__(self, device: torch.device = "cpu"):
        self.device = device

    def __repr__(self):
        return " ------ base material class - doesn't define anything yet -------"

    def set_device(self, device):
        """move all tensors of the class to device"""
        self.device = device

    def get_epsilon(self, wavelength):
        """return permittivity at `wavelength` (in nm)"""
        raise NotImplementedError("Needs to be implemented in child class.")

    def get_refractive_index(self, wavelength):
        """complex refractive index at `wavelength` (in nm)"""
        return torch.sqrt(self.get_epsilon(wavelength))


class MatConstant(MaterialBase):
    """constant material index

    Material without dispersion
    """

    def __init__(self, eps=2.0 + 0.0j, device: torch.device = "cpu"):
        """constant permittivity material

        Args:
            eps (complex, optional): complex permittivity value. Defaults to (2.0 + 0.0j).
            device (torch.device, optional): Defaults to "cpu"
        """
        super().__init__(device=device)

        self.eps_scalar = torch.as_tensor(eps, dtype=DTYPE_COMPLEX, device=self.device)

        _eps_re = float(self.eps_scalar.real)
        _eps_im = float(self.eps_scalar.imag)
        if _eps_im == 0:
            self.__name__ = "eps={:.2f}".format(_eps_re)
        else:
            self.__name__ = "eps={:.2f}+i{:.3f}".format(_eps_re, _eps_im)

    def __repr__(self):
        return "constant, isotropic material. permittivity = {:.2f}".format(
            complex(self.eps_scalar)
        )

    def set_device(self, device):
        super().set_device(device)
        self.eps_scalar = self.eps_scalar.to(device)

    def get_epsilon(self, wavelength):
        """dispersionless, constant permittivity

        Args:
            wavelength (torch.Tensor): in nm

        Returns:
            torch.Tensor: complex permittivity, one value per wavelength
        """
        wavelength = _as_wavelength(wavelength, self.device)
        return torch.ones_like(wavelength) * self.eps_scalar


class MatDrude(MaterialBase):
    """Drude metal

    eps(w) = eps_inf - w_p^2 / (w^2 + i gamma w), energies in eV
    """

    def __init__(
        self, eps_inf=1.0, omega_p=9.0, gamma=0.07, name="Drude", device="cpu"
    ):
        """free-electron permittivity

        Args:
            eps_inf (float, optional): background permittivity. Defaults to 1.0.
            omega_p (float, optional): plasma energy (eV). Defaults to 9.0.
            gamma (float, optional): damping (eV). Defaults to 0.07.
            name (str, optional): material name. Defaults to "Drude".
            device (str, optional): Defaults to "cpu".
        """
        super().__init__(device=device)
        self.eps_inf = eps_inf
        self.omega_p = omega_p
        self.gamma = gamma
        self.__name__ = name

    def __repr__(self):
        return "Drude material '{}': eps_inf={}, omega_p={}eV, gamma={}eV".format(
            self.__name__, self.eps_inf, self.omega_p, self.gamma
        )

    def get_epsilon(self, wavelength):
        wavelength = _as_wavelength(wavelength, self.device)
        w = HC_EV_NM / wavelength
        return self.eps_inf - self.omega_p**2 / (w**2 + 1j * self.gamma * w)

    @classmethod
    def gold(cls, device="cpu"):
        """Drude fit for gold, reasonable above ~550nm (no interband transitions)"""
        return cls(eps_inf=9.5, omega_p=8.95, gamma=0.069, name="Au (Drude)", device=device)


class MatDatabase(MaterialBase):
    """dispersion from a refractiveindex.info file

    Loads a yaml file downloaded from https://refractiveindex.info/.
    Currently supported formats are tabulated n(k) data and the Sellmeier
    model (formula 1).

    Requires `pyyaml` (pip3 install pyyaml)
    """

    def __init__(self, yaml_file, name=None, device: torch.device = "cpu"):
        """dispersion from a refractiveindex.info yaml file

        Args:
            yaml_file (str): path to the yaml file to load
            name (str, optional): material name. Defaults to the file name.
            device (torch.device, optional): Defaults to "cpu".

        Raises:
            ValueError: unknown dispersion model type
        """
        import yaml

        super().__init__(device=device)

        if name:
            self.__name__ = name
        else:
            self.__name__ = pathlib.Path(yaml_file).stem

        with open(yaml_file, "r", encoding="utf8") as f:
            self.dset = yaml.load(f, Loader=yaml.BaseLoader)

        if len(self.dset["DATA"]) > 1:
            warnings.warn(
                "Several model entries in data-set for '{}' ({}). Using first entry.".format(
                    self.__name__, yaml_file
                )
            )
        dat = self.dset["DATA"][0]
        self.type = dat["type"]
        self.wl_dat = torch.Tensor([])
        self.eps_dat = torch.Tensor([])

        # - tabulated data
        if self.type.split()[0] == "tabulated":
            wl_dat, eps_dat = _load_tabulated(dat)
            self.wl_dat = torch.as_tensor(wl_dat, dtype=DTYPE_FLOAT, device=self.device)
            self.eps_dat = torch.as_tensor(eps_dat, dtype=DTYPE_COMPLEX, device=self.device)
            self.model_type = "data"
            self.coeff = []
            self.wl_range = [float(torch.min(self.wl_dat)), float(torch.max(self.wl_dat))]

        # - Sellmeier
        elif self.type.split()[0] == "formula":
            model_type, self.wl_range, self.coeff = _load_formula(dat)
            if model_type != 1:
                raise ValueError(
                    "refractiveindex.info formula {} not implemented yet.".format(model_type)
                )
            self.model_type = "sellmeier"
        else:
            raise ValueError(
                "refractiveindex.info data type '{}' not implemented yet.".format(self.type)
            )

    def __repr__(self):
        out_str = ' ----- Material "{}" ({}) -----'.format(self.__name__, self.model_type)
        if self.model_type == "data":
            out_str += "\n tabulated wavelength range: {:.1f}nm - {:.1f}nm".format(*self.wl_range)
        elif self.model_type == "sellmeier":
            out_str += "\n Sellmeier model validity range: {:.1f}nm - {:.1f}nm".format(
                *self.wl_range
            )
        return out_str

    def set_device(self, device):
        super().set_device(device)
        self.wl_dat = self.wl_dat.to(device)
        self.eps_dat = self.eps_dat.to(device)

    def get_epsilon(self, wavelength):
        """get permittivity at `wavelength`

        Args:
            wavelength (torch.Tensor): in nm

        Returns:
            torch.Tensor: complex permittivity, one value per wavelength
        """
        wavelength = _as_wavelength(wavelength, self.device)

        if torch.any(wavelength < self.wl_range[0]) or torch.any(wavelength > self.wl_range[1]):
            warnings.warn(
                "'{}': wavelengths outside of the data range {:.1f}nm - {:.1f}nm.".format(
                    self.__name__, *self.wl_range
                )
            )

        # - tabulated, linear interpolation
        if self.model_type == "data":
            eps = interp1d(wavelength, self.wl_dat, self.eps_dat)

        # - Sellmeier, coefficients for wavelengths in microns
        else:
            wl_mu = wavelength / 1000.0
            eps = 1 + self.coeff[0] + torch.zeros_like(wl_mu)
            for i in range(1, len(self.coeff), 2):
                c1, c2 = self.coeff[i], self.coeff[i + 1]
                eps = eps + c1 * wl_mu**2 / (wl_mu**2 - c2**2)

        return eps.to(DTYPE_COMPLEX)
